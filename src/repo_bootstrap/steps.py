"""Best-effort application of the repository setup.

Each remote call is attempted on its own. A failure is recorded in the
:class:`SetupReport` and the run moves on to the next call, so a partial run
leaves the repository in a usable state and can simply be re-run.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from .api import GhNotFoundError, GitHubAPI, GitHubAPIError
from .config import MergeSettings, RulesetSettings, SecuritySettings, SetupConfig
from .i18n import translate as _
from .ruleset import build_ruleset_payload, serialize_payload, summarize_rule
from .validation import validate_ruleset_payload

logger = logging.getLogger(__name__)

PHASE_GENERAL = "general"
PHASE_SECURITY = "security"
PHASE_RULESET = "ruleset"
PHASE_LABELS = "labels"

STATUS_OK = "ok"
STATUS_FAILED = "failed"
STATUS_SKIPPED = "skipped"


@dataclass(slots=True)
class StepResult:
    phase: str
    name: str
    status: str
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    @property
    def failed(self) -> bool:
        return self.status == STATUS_FAILED


@dataclass
class SetupReport:
    repository: str
    dry_run: bool = False
    results: List[StepResult] = field(default_factory=list)

    def add(self, result: StepResult) -> StepResult:
        self.results.append(result)
        return result

    @property
    def succeeded(self) -> List[StepResult]:
        return [result for result in self.results if result.ok]

    @property
    def failed(self) -> List[StepResult]:
        return [result for result in self.results if result.failed]

    @property
    def skipped(self) -> List[StepResult]:
        return [result for result in self.results if result.status == STATUS_SKIPPED]

    def for_phase(self, phase: str) -> List[StepResult]:
        return [result for result in self.results if result.phase == phase]


def attempt(
    report: SetupReport,
    phase: str,
    name: str,
    action: Callable[[], Any],
) -> StepResult:
    """Run one remote call and record its outcome instead of raising.

    A missing `gh` executable is not a per-call failure and propagates.
    """

    if report.dry_run:
        return report.add(StepResult(phase, name, STATUS_SKIPPED, reason="dry run"))
    try:
        action()
    except GhNotFoundError:
        raise
    except GitHubAPIError as exc:
        reason = str(exc)
        if exc.stderr and exc.stderr.strip() not in reason:
            reason = f"{reason} {exc.stderr.strip()}"
        logger.info("Step %s/%s failed: %s", phase, name, reason)
        return report.add(StepResult(phase, name, STATUS_FAILED, reason=reason))
    logger.debug("Step %s/%s succeeded", phase, name)
    return report.add(StepResult(phase, name, STATUS_OK))


# ---------------------------------------------------------------------------
# Phases


def apply_general_settings(api: GitHubAPI, merge: MergeSettings, report: SetupReport) -> None:
    print(_("phase_general", "\nUpdating general settings..."))
    attempt(report, PHASE_GENERAL, "repo-edit", lambda: api.edit_repository(merge))


def apply_security_settings(
    api: GitHubAPI, security: SecuritySettings, report: SetupReport
) -> None:
    print(_("phase_security", "\nEnabling security features..."))
    if security.enable_vulnerability_alerts:
        attempt(report, PHASE_SECURITY, "vulnerability-alerts", api.enable_vulnerability_alerts)
    if security.enable_automated_security_fixes:
        attempt(
            report,
            PHASE_SECURITY,
            "automated-security-fixes",
            api.enable_automated_security_fixes,
        )
    if security.enable_secret_scanning:
        attempt(report, PHASE_SECURITY, "secret-scanning", api.enable_secret_scanning)


def apply_branch_ruleset(
    api: GitHubAPI,
    settings: RulesetSettings,
    report: SetupReport,
    *,
    skip_validate: bool = False,
    replace_existing: bool = False,
) -> StepResult:
    print(_("phase_ruleset", "\nCreating branch ruleset..."))
    payload = build_ruleset_payload(settings)
    for rule in payload["rules"]:
        logger.debug("Ruleset rule: %s", summarize_rule(rule))

    if report.dry_run:
        print(serialize_payload(payload, indent=2))

    if not skip_validate:
        errors = validate_ruleset_payload(payload)
        if errors:
            for error in errors:
                logger.info("Ruleset payload rejected locally: %s", error)
            _warn_ruleset_failed()
            return report.add(
                StepResult(PHASE_RULESET, settings.name, STATUS_FAILED, reason="; ".join(errors))
            )

    def submit() -> None:
        ruleset_id = api.find_ruleset_id(settings.name) if replace_existing else None
        if ruleset_id is not None:
            logger.info("Updating existing ruleset %s (%s)", ruleset_id, settings.name)
            api.update_ruleset(ruleset_id, payload)
        else:
            api.create_ruleset(payload)

    result = attempt(report, PHASE_RULESET, settings.name, submit)
    if result.failed:
        _warn_ruleset_failed()
    return result


def _warn_ruleset_failed() -> None:
    print(
        _(
            "ruleset_failed",
            "  Warning: ruleset creation failed (might already exist or permission issue)",
        ),
        file=sys.stderr,
    )


def apply_labels(api: GitHubAPI, config: SetupConfig, report: SetupReport) -> None:
    print(_("phase_labels", "\nCreating labels..."))
    for label in config.labels:
        attempt(report, PHASE_LABELS, label.name, lambda label=label: api.upsert_label(label))


def run_setup(
    api: GitHubAPI,
    config: SetupConfig,
    *,
    dry_run: bool = False,
    skip_validate: bool = False,
    replace_existing: bool = False,
) -> SetupReport:
    """Apply ``config`` to the repository behind ``api``."""

    report = SetupReport(repository=api.repo.full_name, dry_run=dry_run)
    print(
        _(
            "setup_start",
            "Configuring GitHub repository: {repo}",
            repo=report.repository,
        )
    )
    if dry_run:
        print(_("setup_dry_run", "(dry run: no change will be made)"))

    apply_general_settings(api, config.merge, report)
    apply_security_settings(api, config.security, report)
    if config.ruleset.enabled:
        apply_branch_ruleset(
            api,
            config.ruleset,
            report,
            skip_validate=skip_validate,
            replace_existing=replace_existing,
        )
    if config.create_labels:
        apply_labels(api, config, report)

    print_report(report)
    return report


def print_report(report: SetupReport) -> None:
    print(
        _(
            "summary_counts",
            "\nSummary: {ok} succeeded, {failed} failed, {skipped} skipped.",
            ok=len(report.succeeded),
            failed=len(report.failed),
            skipped=len(report.skipped),
        )
    )
    for result in report.failed:
        print(
            _(
                "summary_failure_entry",
                "- [{phase}] {name}: {reason}",
                phase=result.phase,
                name=result.name,
                reason=result.reason,
            )
        )
    print(_("setup_done", "\nDone!"))


__all__ = [
    "SetupReport",
    "StepResult",
    "apply_branch_ruleset",
    "apply_general_settings",
    "apply_labels",
    "apply_security_settings",
    "attempt",
    "print_report",
    "run_setup",
]
