"""Offline checks for a ruleset payload before it is sent to GitHub.

Only the JSON-schema keywords used by :data:`RULESET_SCHEMA` are understood:
``type``, ``enum``, ``required``, ``properties``, ``items``, ``minLength``,
``minimum``/``maximum``, ``allOf``, ``if``/``then`` with ``const`` and local
``$ref`` pointers into ``$defs``. Properties the schema does not describe are
accepted.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Mapping

from .schema import RULESET_SCHEMA

_PYTHON_TYPES: Dict[str, type | tuple[type, ...]] = {
    "object": dict,
    "array": list,
    "string": str,
    "integer": int,
    "boolean": bool,
}

_DEFS_PREFIX = "#/$defs/"


def validate_ruleset_payload(payload: Dict[str, Any]) -> List[str]:
    """Return a list of validation errors for the ruleset payload."""

    errors = list(_iter_schema_errors(RULESET_SCHEMA, payload, "payload"))
    errors.extend(_iter_bypass_actor_errors(payload.get("bypass_actors")))
    errors.extend(_iter_rule_errors(payload.get("rules")))
    return errors


def _iter_schema_errors(schema: Mapping[str, Any], data: Any, path: str) -> Iterator[str]:
    schema = _dereference(schema)

    expected = schema.get("type")
    if expected and not _is_instance(data, expected):
        yield f"{path}: expected type '{expected}', got '{type(data).__name__}'."
        return
    if "enum" in schema and data not in schema["enum"]:
        yield f"{path}: value '{data}' is not one of {schema['enum']}."
        return

    if isinstance(data, dict):
        for key in schema.get("required", ()):
            if key not in data:
                yield f"{path}.{key} is required."
        properties = schema.get("properties", {})
        for key, value in data.items():
            if key in properties:
                yield from _iter_schema_errors(properties[key], value, f"{path}.{key}")
    elif isinstance(data, list) and "items" in schema:
        for index, item in enumerate(data):
            yield from _iter_schema_errors(schema["items"], item, f"{path}[{index}]")
    elif isinstance(data, str):
        if len(data) < schema.get("minLength", 0):
            yield f"{path}: shorter than the minimum length {schema['minLength']}."
    elif _is_instance(data, "integer"):
        if "minimum" in schema and data < schema["minimum"]:
            yield f"{path}: {data} is below the minimum {schema['minimum']}."
        if "maximum" in schema and data > schema["maximum"]:
            yield f"{path}: {data} is above the maximum {schema['maximum']}."

    for branch in schema.get("allOf", ()):
        yield from _iter_schema_errors(branch, data, path)
    if "then" in schema and _condition_holds(schema.get("if", {}), data):
        yield from _iter_schema_errors(schema["then"], data, path)


def _dereference(schema: Mapping[str, Any]) -> Mapping[str, Any]:
    ref = schema.get("$ref")
    if not isinstance(ref, str) or not ref.startswith(_DEFS_PREFIX):
        return schema
    target = RULESET_SCHEMA["$defs"].get(ref[len(_DEFS_PREFIX):])
    if target is None:
        raise KeyError(f"Unknown schema reference: {ref}")
    return target


def _condition_holds(condition: Mapping[str, Any], data: Any) -> bool:
    # Conditions only pin object properties to constants.
    if not isinstance(data, dict):
        return False
    for key, expected in condition.get("properties", {}).items():
        if key not in data:
            return False
        if "const" in expected and data[key] != expected["const"]:
            return False
    return True


def _is_instance(data: Any, schema_type: str) -> bool:
    python_type = _PYTHON_TYPES.get(schema_type)
    if python_type is None:
        return True
    if schema_type == "integer" and isinstance(data, bool):
        return False
    return isinstance(data, python_type)


def _iter_bypass_actor_errors(bypass_actors: Any) -> Iterator[str]:
    if not isinstance(bypass_actors, list):
        return
    for index, actor in enumerate(bypass_actors):
        if not isinstance(actor, dict):
            continue
        location = f"payload.bypass_actors[{index}]"
        actor_type = actor.get("actor_type")
        has_id = _is_instance(actor.get("actor_id"), "integer")
        if actor_type == "RepositoryRole" and not (has_id or actor.get("repository_role_name")):
            yield f"{location}: actor_id or repository_role_name is required for RepositoryRole."
        elif actor_type in ("Team", "Integration") and not has_id:
            yield f"{location}.actor_id must be an integer for {actor_type}."


def _iter_rule_errors(rules: Any) -> Iterator[str]:
    if not isinstance(rules, list):
        return
    seen: set[str] = set()
    for index, rule in enumerate(rules):
        if not isinstance(rule, dict):
            continue
        rule_type = rule.get("type")
        if rule_type in seen:
            yield f"payload.rules[{index}]: duplicate rule type '{rule_type}'."
        elif isinstance(rule_type, str):
            seen.add(rule_type)
        if rule_type != "required_status_checks":
            continue
        parameters = rule.get("parameters")
        checks = parameters.get("required_status_checks") if isinstance(parameters, dict) else None
        if isinstance(checks, list) and not checks:
            yield (
                f"payload.rules[{index}].parameters.required_status_checks "
                "must contain at least one check."
            )


__all__ = ["validate_ruleset_payload"]
