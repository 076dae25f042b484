import json
from dataclasses import replace

import pytest

from repo_bootstrap.api import GhNotFoundError
from repo_bootstrap.config import (
    Label,
    SecuritySettings,
    SetupConfig,
    StatusCheckSettings,
)
from repo_bootstrap.steps import (
    PHASE_GENERAL,
    PHASE_LABELS,
    PHASE_RULESET,
    PHASE_SECURITY,
    STATUS_FAILED,
    STATUS_SKIPPED,
    SetupReport,
    attempt,
    run_setup,
)


def test_full_run_issues_every_call(api, gh, capsys):
    report = run_setup(api, SetupConfig())

    assert not report.failed
    assert [result.phase for result in report.results] == (
        [PHASE_GENERAL] + [PHASE_SECURITY] * 3 + [PHASE_RULESET] + [PHASE_LABELS] * 6
    )
    commands = gh.commands
    assert commands[0].startswith("gh repo edit octo/widgets")
    assert "/repos/octo/widgets/rulesets --method POST" in commands[4]
    assert sum(command.startswith("gh label create") for command in commands) == 6

    ruleset_stdin = gh.calls[4][1]
    payload = json.loads(ruleset_stdin)
    assert [rule["type"] for rule in payload["rules"]] == [
        "deletion",
        "non_fast_forward",
        "required_linear_history",
        "pull_request",
        "required_status_checks",
    ]

    out = capsys.readouterr().out
    assert "Configuring GitHub repository: octo/widgets" in out
    assert "Updating general settings..." in out
    assert "Summary: 11 succeeded, 0 failed, 0 skipped." in out
    assert out.rstrip().endswith("Done!")


def test_failures_do_not_stop_the_run(api, gh, capsys):
    gh.fail_when("automated-security-fixes")
    gh.fail_when("label create bug")

    report = run_setup(api, SetupConfig())

    failed = [(result.phase, result.name) for result in report.failed]
    assert failed == [(PHASE_SECURITY, "automated-security-fixes"), (PHASE_LABELS, "bug")]
    assert len(report.succeeded) == 9
    assert "HTTP 403" in report.failed[0].reason
    assert any("secret-scanning" == result.name for result in report.succeeded)

    captured = capsys.readouterr()
    # Only ruleset failures print a warning while the phase runs.
    assert "Warning" not in captured.err
    assert "- [security] automated-security-fixes:" in captured.out


def test_ruleset_failure_prints_single_warning(api, gh, capsys):
    gh.fail_when("/rulesets", "HTTP 422: Name must be unique")

    report = run_setup(api, SetupConfig())

    assert [result.phase for result in report.failed] == [PHASE_RULESET]
    assert report.for_phase(PHASE_LABELS)[-1].ok
    err_lines = [line for line in capsys.readouterr().err.splitlines() if line.strip()]
    assert err_lines == [
        "  Warning: ruleset creation failed (might already exist or permission issue)"
    ]


def test_disabled_phases_make_no_calls(api, gh):
    config = replace(
        SetupConfig(),
        security=SecuritySettings(
            enable_vulnerability_alerts=False,
            enable_automated_security_fixes=False,
            enable_secret_scanning=False,
        ),
        ruleset=replace(SetupConfig().ruleset, enabled=False),
        create_labels=False,
    )

    report = run_setup(api, config)

    assert [result.phase for result in report.results] == [PHASE_GENERAL]
    assert len(gh.calls) == 1


def test_custom_labels(api, gh):
    config = replace(SetupConfig(), labels=(Label("triage", "Needs triage", "fbca04"),))
    report = run_setup(api, config)
    assert [result.name for result in report.for_phase(PHASE_LABELS)] == ["triage"]


def test_dry_run_calls_nothing(api, gh, capsys):
    report = run_setup(api, SetupConfig(), dry_run=True)

    assert gh.calls == []
    assert report.results
    assert all(result.status == STATUS_SKIPPED for result in report.results)
    out = capsys.readouterr().out
    assert '"name": "Main Branch Protection"' in out
    assert "(dry run: no change will be made)" in out


def test_invalid_ruleset_is_not_submitted(api, gh, capsys):
    ruleset = replace(SetupConfig().ruleset, status_checks=StatusCheckSettings(contexts=()))
    report = run_setup(api, replace(SetupConfig(), ruleset=ruleset))

    ruleset_results = report.for_phase(PHASE_RULESET)
    assert ruleset_results[0].status == STATUS_FAILED
    assert "at least one check" in ruleset_results[0].reason
    assert not any("/rulesets" in command for command in gh.commands)
    err_lines = [line for line in capsys.readouterr().err.splitlines() if line.strip()]
    assert err_lines == [
        "  Warning: ruleset creation failed (might already exist or permission issue)"
    ]


def test_skip_validate_submits_anyway(api, gh):
    ruleset = replace(SetupConfig().ruleset, status_checks=StatusCheckSettings(contexts=()))
    run_setup(api, replace(SetupConfig(), ruleset=ruleset), skip_validate=True)
    assert any("/rulesets --method POST" in command for command in gh.commands)


def test_replace_existing_updates_matching_ruleset(api, gh):
    gh.respond_when(
        "/rulesets --method GET",
        json.dumps([{"id": 31, "name": "Main Branch Protection"}]),
    )
    report = run_setup(api, SetupConfig(), replace_existing=True)

    assert report.for_phase(PHASE_RULESET)[0].ok
    assert any("/rulesets/31 --method PUT" in command for command in gh.commands)
    assert not any("/rulesets --method POST" in command for command in gh.commands)


def test_replace_existing_creates_when_absent(api, gh):
    gh.respond_when("/rulesets --method GET", "[]")
    run_setup(api, SetupConfig(), replace_existing=True)
    assert any("/rulesets --method POST" in command for command in gh.commands)


def test_attempt_records_reason():
    report = SetupReport(repository="octo/widgets")

    def boom():
        from repo_bootstrap.api import GitHubAPIError

        raise GitHubAPIError("Command failed", stderr="HTTP 500")

    result = attempt(report, PHASE_SECURITY, "boom", boom)
    assert result.failed
    assert result.reason == "Command failed HTTP 500"
    assert report.failed == [result]


def test_missing_gh_aborts_the_run(api, monkeypatch):
    def missing(*args, **kwargs):
        raise FileNotFoundError("gh")

    monkeypatch.setattr("repo_bootstrap.api.subprocess.run", missing)
    with pytest.raises(GhNotFoundError):
        run_setup(api, SetupConfig())
