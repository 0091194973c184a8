"""Turn metadata service rules and allowlists into a JSON Schema document.

The metadata service describes front-matter expectations as two documents.
The rules document maps each attribute to the rules applied to it::

    {"ms.topic": {"Required": {}, "List": {"list": "list:topic"}}}

and the allowlists document maps list identifiers to their allowed values::

    {"list:topic": {"values": {"article": {}, "overview": {}}}}

:func:`generate_json_schema` folds both into a draft-07 schema that the
build's metadata validator understands. Rule names other than ``Required``
and ``List`` are ignored.

Example
-------
>>> import json
>>> rules = '{"ms.topic": {"Required": {}, "List": {"list": "topics"}}}'
>>> allowlists = '{"topics": {"values": ["article", "overview"]}}'
>>> schema = json.loads(generate_json_schema(rules, allowlists))
>>> schema["required"], schema["properties"]["ms.topic"]["enum"]
(['ms.topic'], ['article', 'overview'])
"""

from __future__ import annotations

import json
import typing as typ

JSON_SCHEMA_DRAFT = "http://json-schema.org/draft-07/schema#"


def generate_json_schema(rules_text: str, allowlists_text: str) -> str:
    """Return a JSON Schema string built from the two service documents.

    Raises
    ------
    ValueError
        If either document is not a JSON object.
    """
    rules = _load_object(rules_text, "rules")
    allowlists = _load_object(allowlists_text, "allowlists")

    properties: dict[str, dict[str, typ.Any]] = {}
    required: list[str] = []
    for attribute, attribute_rules in rules.items():
        if not isinstance(attribute_rules, dict):
            continue
        if "Required" in attribute_rules:
            required.append(attribute)
        properties[attribute] = _build_property(attribute_rules.get("List"), allowlists)

    schema: dict[str, typ.Any] = {
        "$schema": JSON_SCHEMA_DRAFT,
        "type": "object",
        "properties": properties,
    }
    if required:
        schema["required"] = required
    return json.dumps(schema)


def _build_property(
    list_rule: object, allowlists: typ.Mapping[str, typ.Any]
) -> dict[str, typ.Any]:
    if not isinstance(list_rule, dict):
        return {}
    values = _allowed_values(allowlists.get(str(list_rule.get("list", ""))))
    if values is None:
        return {}
    item: dict[str, typ.Any] = {"type": "string", "enum": values}
    if list_rule.get("multiple"):
        return {"type": "array", "items": item}
    return item


def _allowed_values(entry: object) -> list[str] | None:
    if not isinstance(entry, dict):
        return None
    match entry.get("values"):
        case dict() as mapping:
            return [str(value) for value in mapping]
        case list() as sequence:
            return [str(value) for value in sequence]
        case _:
            return None


def _load_object(text: str, label: str) -> dict[str, typ.Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"Metadata {label} document is not valid JSON"
        raise ValueError(msg) from exc
    if not isinstance(data, dict):
        msg = f"Metadata {label} document must be a JSON object"
        raise ValueError(msg)
    return data


__all__ = ["JSON_SCHEMA_DRAFT", "generate_json_schema"]
