from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .api import GitHubAPI, GitHubAPIError
from .config import ConfigError, SetupConfig, load_config
from .i18n import available_languages, language_from_env, set_language
from .i18n import translate as _
from .ruleset import build_ruleset_payload, serialize_payload
from .steps import run_setup
from .utils import resolve_repository

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def main(argv: Optional[List[str]] = None) -> None:
    set_language(language_from_env())
    parser = build_parser()
    args = parser.parse_args(argv)

    set_language(args.lang or language_from_env())
    configure_logging(args.verbose)

    try:
        config = load_config(args.config) if args.config else SetupConfig()
        if args.print_payload:
            print(serialize_payload(build_ruleset_payload(config.ruleset), indent=2))
            return
        repo = resolve_repository(args.repo)
        api = GitHubAPI(repo)
        report = run_setup(
            api,
            config,
            dry_run=args.dry_run,
            skip_validate=args.skip_validate,
            replace_existing=args.replace_existing,
        )
    except KeyboardInterrupt:
        print(_("error_keyboard_interrupt", "\nInterrupted by user (Ctrl+C)."), file=sys.stderr)
        sys.exit(130)
    except ConfigError as exc:
        print(_("error_config", "Error: {message}", message=exc), file=sys.stderr)
        sys.exit(1)
    except GitHubAPIError as exc:
        print(_("error_api", "Error: {message}", message=exc), file=sys.stderr)
        if exc.stderr:
            print(exc.stderr, file=sys.stderr)
        sys.exit(1)

    if args.strict and report.failed:
        sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gh-repo-bootstrap",
        description=_(
            "cli_description",
            "Apply merge settings, security features, a branch ruleset and labels "
            "to a new GitHub repository.",
        ),
    )
    parser.add_argument(
        "repo",
        nargs="?",
        help=_(
            "arg_repo_help",
            "Target repository (OWNER/REPO or HOST/OWNER/REPO). "
            "Defaults to $GH_REPO, then the current gh repo.",
        ),
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        help=_(
            "option_config_help",
            "JSON file overriding the built-in settings.",
        ),
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help=_(
            "option_dry_run_help",
            "Show what would be applied without calling GitHub.",
        ),
    )
    parser.add_argument(
        "--print-payload",
        action="store_true",
        help=_(
            "option_print_payload_help",
            "Print the branch ruleset JSON and exit.",
        ),
    )
    parser.add_argument(
        "--skip-validate",
        action="store_true",
        help=_(
            "option_skip_validate_help",
            "Skip local payload validation against the OpenAPI schema.",
        ),
    )
    parser.add_argument(
        "--replace-existing",
        action="store_true",
        help=_(
            "option_replace_existing_help",
            "Update a ruleset with the same name instead of creating another one.",
        ),
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help=_(
            "option_strict_help",
            "Exit with status 1 when any step failed.",
        ),
    )
    parser.add_argument(
        "--lang",
        choices=sorted(available_languages().keys()),
        help=_("arg_lang_help", "Interface language (default: English)."),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help=_("option_verbose_help", "Log gh invocations and step outcomes."),
    )
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


if __name__ == "__main__":  # pragma: no cover
    main()
