from __future__ import annotations

import os
from typing import Mapping, Optional
from urllib.parse import urlparse

from .api import GitHubAPIError, Repository, run_gh
from .i18n import translate as _

REPO_ENV_VAR = "GH_REPO"


def parse_repository_input(value: str) -> Repository:
    """Parse repo input like owner/name, host/owner/name or a URL."""

    value = value.strip()
    if value.startswith("http://") or value.startswith("https://"):
        parsed = urlparse(value)
        parts = [segment for segment in parsed.path.split("/") if segment]
        if len(parts) < 2:
            raise GitHubAPIError(
                _(
                    "error_repo_url",
                    "Unable to interpret the URL. Expected format: https://HOST/OWNER/REPO.",
                )
            )
        owner, name = parts[-2], parts[-1]
        if name.endswith(".git"):
            name = name[: -len(".git")]
        return Repository(owner=owner, name=name, hostname=parsed.hostname)

    parts = value.split("/")
    if all(parts):
        if len(parts) == 2:
            owner, name = parts
            return Repository(owner=owner, name=name)
        if len(parts) == 3:
            hostname, owner, name = parts
            return Repository(owner=owner, name=name, hostname=hostname)

    raise GitHubAPIError(
        _(
            "error_repo_format",
            "Invalid repository '{value}'. Use OWNER/REPO or HOST/OWNER/REPO.",
            value=value,
        )
    )


def resolve_repository(
    repo_input: Optional[str],
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> Repository:
    """Resolve repository from input, GH_REPO or the current gh context."""

    if repo_input:
        return parse_repository_input(repo_input)

    env = os.environ if environ is None else environ
    from_env = env.get(REPO_ENV_VAR, "").strip()
    if from_env:
        return parse_repository_input(from_env)

    try:
        output = run_gh(
            ["gh", "repo", "view", "--json", "nameWithOwner", "--jq", ".nameWithOwner"]
        )
    except GitHubAPIError as exc:
        raise GitHubAPIError(
            _(
                "error_repo_current",
                "Unable to determine the current repository with `gh repo view`. "
                "Pass OWNER/REPO as argument.",
            ),
            stderr=exc.stderr,
        ) from exc

    name_with_owner = output.strip()
    if not name_with_owner:
        raise GitHubAPIError(
            _("error_repo_empty", "Empty answer from `gh repo view`. Pass OWNER/REPO as argument.")
        )
    return parse_repository_input(name_with_owner)
