"""Schema fragments derived from GitHub's REST OpenAPI description.

The schema below covers the Repository Ruleset create payload as assembled by
:mod:`repo_bootstrap.ruleset`: the envelope, ref-name conditions, bypass
actors and the parameter shapes of the ``pull_request`` and
``required_status_checks`` rules. It is deliberately a subset so that
validation stays dependency-free while matching the official description
(see https://github.com/github/rest-api-description).
"""

RULE_TYPES = [
    "creation",
    "update",
    "deletion",
    "required_linear_history",
    "required_deployments",
    "required_signatures",
    "pull_request",
    "required_status_checks",
    "non_fast_forward",
]

RULESET_SCHEMA = {
    "type": "object",
    "required": ["name", "enforcement"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "target": {"type": "string", "enum": ["branch", "tag", "push"]},
        "enforcement": {"type": "string", "enum": ["disabled", "evaluate", "active"]},
        "bypass_actors": {
            "type": "array",
            "items": {"$ref": "#/$defs/bypass_actor"},
        },
        "conditions": {"$ref": "#/$defs/conditions"},
        "rules": {
            "type": "array",
            "items": {"$ref": "#/$defs/rule"},
        },
    },
    "$defs": {
        "bypass_actor": {
            "type": "object",
            "required": ["actor_type", "bypass_mode"],
            "properties": {
                "actor_type": {
                    "type": "string",
                    "enum": [
                        "RepositoryRole",
                        "Team",
                        "Integration",
                        "OrganizationAdmin",
                        "EnterpriseAdmin",
                    ],
                },
                "bypass_mode": {"type": "string", "enum": ["always", "pull_request"]},
                "repository_role_name": {"type": "string", "minLength": 1},
                "actor_id": {"type": "integer"},
            },
        },
        "conditions": {
            "type": "object",
            "properties": {
                "ref_name": {
                    "type": "object",
                    "required": ["include", "exclude"],
                    "properties": {
                        "include": {"$ref": "#/$defs/string_array"},
                        "exclude": {"$ref": "#/$defs/string_array"},
                    },
                }
            },
        },
        "rule": {
            "type": "object",
            "required": ["type"],
            "properties": {
                "type": {"type": "string", "enum": RULE_TYPES},
                "parameters": {"type": "object"},
            },
            "allOf": [
                {
                    "if": {
                        "properties": {"type": {"const": "required_status_checks"}},
                    },
                    "then": {
                        "type": "object",
                        "required": ["parameters"],
                        "properties": {
                            "parameters": {"$ref": "#/$defs/required_status_checks"},
                        },
                    },
                },
                {
                    "if": {
                        "properties": {"type": {"const": "pull_request"}},
                    },
                    "then": {
                        "type": "object",
                        "required": ["parameters"],
                        "properties": {
                            "parameters": {"$ref": "#/$defs/pull_request"},
                        },
                    },
                },
            ],
        },
        "pull_request": {
            "type": "object",
            "required": [
                "required_approving_review_count",
                "dismiss_stale_reviews_on_push",
                "require_code_owner_review",
                "require_last_push_approval",
                "required_review_thread_resolution",
            ],
            "properties": {
                "required_approving_review_count": {
                    "type": "integer",
                    "minimum": 0,
                    "maximum": 10,
                },
                "dismiss_stale_reviews_on_push": {"type": "boolean"},
                "require_code_owner_review": {"type": "boolean"},
                "require_last_push_approval": {"type": "boolean"},
                "required_review_thread_resolution": {"type": "boolean"},
            },
        },
        "required_status_checks": {
            "type": "object",
            "required": ["required_status_checks", "strict_required_status_checks_policy"],
            "properties": {
                "required_status_checks": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["context"],
                        "properties": {
                            "context": {"type": "string", "minLength": 1},
                            "integration_id": {"type": "integer"},
                        },
                    },
                },
                "strict_required_status_checks_policy": {"type": "boolean"},
                "do_not_enforce_on_create": {"type": "boolean"},
            },
        },
        "string_array": {
            "type": "array",
            "items": {"type": "string"},
        },
    },
}

__all__ = ["RULESET_SCHEMA", "RULE_TYPES"]
