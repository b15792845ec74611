"""Projection of canonical schemas onto JSON Schema documents."""

from __future__ import annotations

from typing import Any

from attest_schema.type_system import (
    ParameterizedType,
    TypeSpec,
    format_tag_for,
    json_type_for,
    type_name,
)

from .schema_models import FieldDefinition, SchemaDefinition

JSON_SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"
# Exact field type; JSON Schema validators ignore unknown keywords.
TYPE_ANNOTATION = "x-stellar-type"


def project_schema(schema: SchemaDefinition) -> dict[str, Any]:
    """Return the JSON Schema document describing records of ``schema``."""
    properties: dict[str, dict[str, Any]] = {}
    required: list[str] = []

    for definition in schema.fields:
        properties[definition.name] = _project_field(definition)
        if not definition.optional:
            required.append(definition.name)

    document: dict[str, Any] = {
        "$schema": JSON_SCHEMA_DIALECT,
        "type": "object",
        "title": schema.name,
    }
    if schema.description:
        document["description"] = schema.description
    document["properties"] = properties
    document["required"] = required
    return document


def _project_field(definition: FieldDefinition) -> dict[str, Any]:
    projected = _type_keywords(definition.field_type)
    projected[TYPE_ANNOTATION] = type_name(definition.field_type)
    if definition.description:
        projected["description"] = definition.description

    validation = definition.validation
    if validation is not None:
        if validation.minimum is not None:
            projected["minimum"] = validation.minimum
        if validation.maximum is not None:
            projected["maximum"] = validation.maximum
        if validation.pattern is not None:
            projected["pattern"] = validation.pattern
        if validation.allowed_values is not None:
            projected["enum"] = list(validation.allowed_values)
    return projected


def _type_keywords(field_type: TypeSpec) -> dict[str, Any]:
    if isinstance(field_type, ParameterizedType) and field_type.is_option:
        keywords = _type_keywords(field_type.arguments[0])
        keywords["type"] = [keywords["type"], "null"]
        return keywords

    keywords: dict[str, Any] = {"type": json_type_for(field_type)}
    format_tag = format_tag_for(field_type)
    if format_tag is not None:
        keywords["format"] = format_tag
    if isinstance(field_type, ParameterizedType):
        if field_type.container == "array":
            keywords["items"] = _type_keywords(field_type.arguments[0])
        else:
            # JSON object keys are always strings; only the value type is expressible.
            keywords["additionalProperties"] = _type_keywords(field_type.arguments[1])
    return keywords
