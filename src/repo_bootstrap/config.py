"""Compiled-in repository setup configuration.

The defaults below describe the recommended posture for a new repository:
squash merges only, every security feature the API exposes switched on, a
protected ``main`` branch and a small set of triage labels. A JSON file can
override any of them (see :func:`load_config`); keys that are not present
keep their default.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Tuple

HEX_COLOR = re.compile(r"[0-9a-fA-F]{6}")
BYPASS_ACTOR_TYPES = (
    "RepositoryRole",
    "Team",
    "Integration",
    "OrganizationAdmin",
    "EnterpriseAdmin",
)
BYPASS_MODES = ("always", "pull_request")


class ConfigError(ValueError):
    """Raised when a configuration file cannot be used."""

    def __init__(self, message: str, errors: List[str] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])


@dataclass(frozen=True)
class MergeSettings:
    enable_squash_merge: bool = True
    enable_rebase_merge: bool = False
    enable_merge_commit: bool = False
    delete_branch_on_merge: bool = True
    enable_auto_merge: bool = True


@dataclass(frozen=True)
class SecuritySettings:
    enable_vulnerability_alerts: bool = True
    enable_automated_security_fixes: bool = True
    enable_secret_scanning: bool = True


@dataclass(frozen=True)
class PullRequestSettings:
    # Zero approvals still requires a pull request, just no human sign-off.
    required_approving_review_count: int = 0
    dismiss_stale_reviews_on_push: bool = True
    require_code_owner_review: bool = False
    require_last_push_approval: bool = False
    required_review_thread_resolution: bool = False


@dataclass(frozen=True)
class StatusCheckSettings:
    strict_required_status_checks_policy: bool = True
    contexts: Tuple[str, ...] = (
        "lint",
        "type-check",
        "test (3.11)",
        "test (3.12)",
        "test (3.13)",
        "test (3.14)",
    )


@dataclass(frozen=True)
class BypassActor:
    actor_id: int = 5
    actor_type: str = "RepositoryRole"
    bypass_mode: str = "always"


@dataclass(frozen=True)
class RulesetSettings:
    enabled: bool = True
    name: str = "Main Branch Protection"
    branch: str = "main"
    restrict_deletions: bool = True
    block_force_pushes: bool = True
    require_linear_history: bool = True
    require_signed_commits: bool = False
    require_pull_request: bool = True
    require_status_checks: bool = True
    pull_request: PullRequestSettings = field(default_factory=PullRequestSettings)
    status_checks: StatusCheckSettings = field(default_factory=StatusCheckSettings)
    bypass_actors: Tuple[BypassActor, ...] = (BypassActor(),)


@dataclass(frozen=True)
class Label:
    name: str
    description: str
    color: str


DEFAULT_LABELS: Tuple[Label, ...] = (
    Label("bug", "Something isn't working", "d73a4a"),
    Label("enhancement", "New feature or request", "a2eeef"),
    Label("documentation", "Improvements or additions to docs", "0075ca"),
    Label("dependencies", "Dependency updates", "0366d6"),
    Label("security", "Security related issues", "d93f0b"),
    Label("good first issue", "Good for newcomers", "7057ff"),
)


@dataclass(frozen=True)
class SetupConfig:
    merge: MergeSettings = field(default_factory=MergeSettings)
    security: SecuritySettings = field(default_factory=SecuritySettings)
    ruleset: RulesetSettings = field(default_factory=RulesetSettings)
    create_labels: bool = True
    labels: Tuple[Label, ...] = DEFAULT_LABELS


# ---------------------------------------------------------------------------
# Loading


def load_config(path: str | Path) -> SetupConfig:
    """Read a JSON override file and merge it over the defaults."""

    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except OSError as exc:
        raise ConfigError(f"Unable to read {path}: {exc.strerror or exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{path} is not valid JSON: {exc}") from exc
    return config_from_dict(data)


def config_from_dict(data: Any) -> SetupConfig:
    errors: List[str] = []
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a JSON object.", ["config: expected an object"])

    base = SetupConfig()
    _check_keys(data, {f.name for f in fields(SetupConfig)}, "config", errors)

    merge = _overlay_flags(base.merge, data.get("merge"), "merge", errors)
    security = _overlay_flags(base.security, data.get("security"), "security", errors)
    ruleset = _load_ruleset(base.ruleset, data.get("ruleset"), errors)

    create_labels = data.get("create_labels", base.create_labels)
    if not isinstance(create_labels, bool):
        errors.append("config.create_labels: expected a boolean")
        create_labels = base.create_labels

    labels = base.labels
    if "labels" in data:
        labels = _load_labels(data["labels"], errors)

    if errors:
        raise ConfigError("Invalid configuration:\n- " + "\n- ".join(errors), errors)

    return SetupConfig(
        merge=merge,
        security=security,
        ruleset=ruleset,
        create_labels=create_labels,
        labels=labels,
    )


def _check_keys(data: Dict[str, Any], allowed: set[str], path: str, errors: List[str]) -> None:
    for key in data:
        if key not in allowed:
            errors.append(f"{path}.{key}: unknown key")


def _overlay_flags(base: Any, data: Any, path: str, errors: List[str]) -> Any:
    """Replace boolean fields of a settings dataclass from ``data``."""

    if data is None:
        return base
    if not isinstance(data, dict):
        errors.append(f"{path}: expected an object")
        return base

    flag_names = {f.name for f in fields(base) if isinstance(getattr(base, f.name), bool)}
    _check_keys(data, flag_names, path, errors)
    changes: Dict[str, bool] = {}
    for key in flag_names & data.keys():
        if isinstance(data[key], bool):
            changes[key] = data[key]
        else:
            errors.append(f"{path}.{key}: expected a boolean")
    return replace(base, **changes)


def _load_ruleset(base: RulesetSettings, data: Any, errors: List[str]) -> RulesetSettings:
    if data is None:
        return base
    if not isinstance(data, dict):
        errors.append("ruleset: expected an object")
        return base

    nested = {"name", "branch", "pull_request", "status_checks", "bypass_actors"}
    flags = {key: value for key, value in data.items() if key not in nested}
    ruleset = _overlay_flags(base, flags, "ruleset", errors)

    changes: Dict[str, Any] = {}
    for key in ("name", "branch"):
        if key in data:
            value = data[key]
            if isinstance(value, str) and value.strip():
                changes[key] = value.strip()
            else:
                errors.append(f"ruleset.{key}: expected a non-empty string")

    if "pull_request" in data:
        changes["pull_request"] = _load_pull_request(base.pull_request, data["pull_request"], errors)
    if "status_checks" in data:
        changes["status_checks"] = _load_status_checks(
            base.status_checks, data["status_checks"], errors
        )
    if "bypass_actors" in data:
        changes["bypass_actors"] = _load_bypass_actors(data["bypass_actors"], errors)

    return replace(ruleset, **changes)


def _load_pull_request(base: PullRequestSettings, data: Any, errors: List[str]) -> PullRequestSettings:
    path = "ruleset.pull_request"
    if not isinstance(data, dict):
        errors.append(f"{path}: expected an object")
        return base

    flags = {k: v for k, v in data.items() if k != "required_approving_review_count"}
    settings = _overlay_flags(base, flags, path, errors)
    if "required_approving_review_count" in data:
        count = data["required_approving_review_count"]
        if isinstance(count, bool) or not isinstance(count, int):
            errors.append(f"{path}.required_approving_review_count: expected an integer")
        elif count < 0:
            errors.append(f"{path}.required_approving_review_count: must be >= 0")
        else:
            settings = replace(settings, required_approving_review_count=count)
    return settings


def _load_status_checks(base: StatusCheckSettings, data: Any, errors: List[str]) -> StatusCheckSettings:
    path = "ruleset.status_checks"
    if not isinstance(data, dict):
        errors.append(f"{path}: expected an object")
        return base

    flags = {k: v for k, v in data.items() if k != "contexts"}
    settings = _overlay_flags(base, flags, path, errors)
    if "contexts" in data:
        contexts = data["contexts"]
        if not isinstance(contexts, list):
            errors.append(f"{path}.contexts: expected a list of strings")
        else:
            valid = True
            for idx, context in enumerate(contexts):
                if not isinstance(context, str) or not context:
                    errors.append(f"{path}.contexts[{idx}]: expected a non-empty string")
                    valid = False
            if valid:
                settings = replace(settings, contexts=tuple(contexts))
    return settings


def _load_bypass_actors(data: Any, errors: List[str]) -> Tuple[BypassActor, ...]:
    path = "ruleset.bypass_actors"
    if not isinstance(data, list):
        errors.append(f"{path}: expected a list")
        return ()

    actors: List[BypassActor] = []
    for idx, item in enumerate(data):
        location = f"{path}[{idx}]"
        if not isinstance(item, dict):
            errors.append(f"{location}: expected an object")
            continue
        _check_keys(item, {f.name for f in fields(BypassActor)}, location, errors)
        actor_id = item.get("actor_id")
        actor_type = item.get("actor_type", "RepositoryRole")
        bypass_mode = item.get("bypass_mode", "always")
        if isinstance(actor_id, bool) or not isinstance(actor_id, int):
            errors.append(f"{location}.actor_id: expected an integer")
            continue
        if actor_type not in BYPASS_ACTOR_TYPES:
            errors.append(f"{location}.actor_type: expected one of {', '.join(BYPASS_ACTOR_TYPES)}")
            continue
        if bypass_mode not in BYPASS_MODES:
            errors.append(f"{location}.bypass_mode: expected one of {', '.join(BYPASS_MODES)}")
            continue
        actors.append(BypassActor(actor_id=actor_id, actor_type=actor_type, bypass_mode=bypass_mode))
    return tuple(actors)


def _load_labels(data: Any, errors: List[str]) -> Tuple[Label, ...]:
    if not isinstance(data, list):
        errors.append("labels: expected a list")
        return DEFAULT_LABELS

    labels: List[Label] = []
    for idx, item in enumerate(data):
        location = f"labels[{idx}]"
        if not isinstance(item, dict):
            errors.append(f"{location}: expected an object")
            continue
        _check_keys(item, {"name", "description", "color"}, location, errors)
        name = item.get("name")
        description = item.get("description", "")
        color = item.get("color", "")
        if not isinstance(name, str) or not name.strip():
            errors.append(f"{location}.name: expected a non-empty string")
            continue
        if not isinstance(description, str):
            errors.append(f"{location}.description: expected a string")
            continue
        if not isinstance(color, str):
            errors.append(f"{location}.color: expected a string")
            continue
        color = color.lstrip("#")
        if not HEX_COLOR.fullmatch(color):
            errors.append(f"{location}.color: expected 6 hexadecimal digits")
            continue
        labels.append(Label(name=name.strip(), description=description, color=color.lower()))
    return tuple(labels)


__all__ = [
    "BypassActor",
    "ConfigError",
    "DEFAULT_LABELS",
    "Label",
    "MergeSettings",
    "PullRequestSettings",
    "RulesetSettings",
    "SecuritySettings",
    "SetupConfig",
    "StatusCheckSettings",
    "config_from_dict",
    "load_config",
]
