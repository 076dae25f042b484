"""Branch-protection ruleset payload assembly.

Turns :class:`~repo_bootstrap.config.RulesetSettings` into the JSON document
accepted by ``POST /repos/{owner}/{repo}/rulesets``. Nothing here touches the
network; submission is the caller's job.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Tuple

from .config import BypassActor, PullRequestSettings, RulesetSettings, StatusCheckSettings

TARGET = "branch"
ENFORCEMENT = "active"
BRANCH_REF_PREFIX = "refs/heads/"

RuleBuilder = Callable[[RulesetSettings], Dict[str, Any]]


def deletion_rule(_settings: RulesetSettings) -> Dict[str, Any]:
    return {"type": "deletion"}


def non_fast_forward_rule(_settings: RulesetSettings) -> Dict[str, Any]:
    return {"type": "non_fast_forward"}


def linear_history_rule(_settings: RulesetSettings) -> Dict[str, Any]:
    return {"type": "required_linear_history"}


def signatures_rule(_settings: RulesetSettings) -> Dict[str, Any]:
    return {"type": "required_signatures"}


def pull_request_rule(settings: RulesetSettings) -> Dict[str, Any]:
    params: PullRequestSettings = settings.pull_request
    return {
        "type": "pull_request",
        "parameters": {
            "required_approving_review_count": int(params.required_approving_review_count),
            "dismiss_stale_reviews_on_push": params.dismiss_stale_reviews_on_push,
            "require_code_owner_review": params.require_code_owner_review,
            "require_last_push_approval": params.require_last_push_approval,
            "required_review_thread_resolution": params.required_review_thread_resolution,
        },
    }


def status_checks_rule(settings: RulesetSettings) -> Dict[str, Any]:
    params: StatusCheckSettings = settings.status_checks
    return {
        "type": "required_status_checks",
        "parameters": {
            "strict_required_status_checks_policy": params.strict_required_status_checks_policy,
            "required_status_checks": [{"context": context} for context in params.contexts],
        },
    }


# Precedence order of the emitted rules. Adding a rule kind is one entry here.
RULE_BUILDERS: Tuple[Tuple[str, RuleBuilder], ...] = (
    ("restrict_deletions", deletion_rule),
    ("block_force_pushes", non_fast_forward_rule),
    ("require_linear_history", linear_history_rule),
    ("require_signed_commits", signatures_rule),
    ("require_pull_request", pull_request_rule),
    ("require_status_checks", status_checks_rule),
)


def build_rules(settings: RulesetSettings) -> List[Dict[str, Any]]:
    return [build(settings) for flag, build in RULE_BUILDERS if getattr(settings, flag)]


def bypass_actor_payload(actor: BypassActor) -> Dict[str, Any]:
    return {
        "actor_id": actor.actor_id,
        "actor_type": actor.actor_type,
        "bypass_mode": actor.bypass_mode,
    }


def build_ruleset_payload(settings: RulesetSettings) -> Dict[str, Any]:
    """Return the ruleset envelope for ``settings``."""

    return {
        "name": settings.name,
        "target": TARGET,
        "enforcement": ENFORCEMENT,
        "conditions": {
            "ref_name": {
                "include": [f"{BRANCH_REF_PREFIX}{settings.branch}"],
                "exclude": [],
            }
        },
        "bypass_actors": [bypass_actor_payload(actor) for actor in settings.bypass_actors],
        "rules": build_rules(settings),
    }


def serialize_payload(payload: Dict[str, Any], *, indent: int | None = None) -> str:
    """Serialize a payload the same way every time."""

    separators = (",", ": ") if indent else (",", ":")
    return json.dumps(payload, indent=indent, separators=separators, ensure_ascii=False)


def summarize_rule(rule: Dict[str, Any]) -> str:
    rule_type = rule.get("type", "?")
    params = rule.get("parameters") or {}
    if rule_type == "required_status_checks":
        contexts = [item.get("context", "?") for item in params.get("required_status_checks", [])]
        strict = " strict" if params.get("strict_required_status_checks_policy") else ""
        return f"required_status_checks{strict} ({', '.join(contexts)})"
    if rule_type == "pull_request":
        count = params.get("required_approving_review_count", 0)
        enabled = [
            key
            for key, value in params.items()
            if key != "required_approving_review_count" and value is True
        ]
        summary = f"pull_request (approvals: {count}"
        if enabled:
            summary += f"; {', '.join(enabled)}"
        return summary + ")"
    return rule_type


__all__ = [
    "RULE_BUILDERS",
    "build_rules",
    "build_ruleset_payload",
    "serialize_payload",
    "summarize_rule",
]
