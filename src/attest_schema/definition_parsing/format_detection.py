"""Source format detection and normalization into canonical schemas."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from attest_schema.configuration.runtime_settings import DetectionSettings
from attest_schema.schema_management.schema_models import (
    FieldDefinition,
    FieldValidation,
    SchemaDefinition,
    SchemaInvariantError,
)
from attest_schema.schema_management.schema_projection import TYPE_ANNOTATION, project_schema
from attest_schema.type_system import (
    FieldType,
    TypeSpec,
    UnknownTypePolicy,
    resolve_type_token,
    type_for_format_tag,
    type_name,
)

from .binary_schema_codec import BINARY_SCHEMA_TAG, decode_binary_schema
from .source_formats import ClassifiedDefinition, ParsedDefinition, ParseError, SourceFormat

_LOGGER = logging.getLogger(__name__)

UNTITLED_SCHEMA_NAME = "Untitled Schema"
_ADDRESS_MEDIA_TYPE_PREFIX = "application/vnd.daccred.address"
_JSON_TYPE_TO_FIELD_TYPE = {
    "string": FieldType.STRING,
    "boolean": FieldType.BOOLEAN,
    "integer": FieldType.INT64,
    "number": FieldType.DOUBLE,
    "array": FieldType.ARRAY,
    "object": FieldType.MAP,
}


def classify_definition(raw: Any, *, binary_tag: str = BINARY_SCHEMA_TAG) -> ClassifiedDefinition:
    """Tag a raw definition with its source format.

    Strings starting with the binary tag are classified without looking at the rest of the
    payload; any other string must be valid JSON.
    """
    value = raw
    if isinstance(raw, str):
        if raw.startswith(binary_tag):
            return ClassifiedDefinition(SourceFormat.BINARY_ENCODED, raw)
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ParseError(f"Schema definition is not valid JSON: {exc}", raw) from exc

    if isinstance(value, Mapping):
        if value.get("$schema"):
            return ClassifiedDefinition(SourceFormat.SCHEMA_DOCUMENT, value)
        if _is_compact_definition(value):
            return ClassifiedDefinition(SourceFormat.COMPACT_DEFINITION, value)
        if isinstance(value.get("properties"), Mapping):
            return ClassifiedDefinition(SourceFormat.PROPERTIES_DOCUMENT, value)
    return ClassifiedDefinition(SourceFormat.RAW_JSON, value)


def parse_definition(raw: Any, settings: DetectionSettings | None = None) -> ParsedDefinition:
    """Normalize a raw definition (string or decoded JSON value) into a canonical schema."""
    settings = settings or DetectionSettings()
    classified = classify_definition(raw, binary_tag=settings.binary_tag)
    source_format = classified.source_format
    payload = classified.payload
    policy = settings.unknown_types

    if source_format is SourceFormat.BINARY_ENCODED:
        _LOGGER.debug("Detected binary schema definition")
        schema = decode_binary_schema(payload, tag=settings.binary_tag, unknown_types=policy)
        return _canonical(source_format, schema, raw)

    if source_format is SourceFormat.SCHEMA_DOCUMENT:
        _LOGGER.debug("Detected JSON Schema document, passing through unchanged")
        schema = _build_schema(raw, lambda: schema_from_properties(payload, policy=policy))
        return ParsedDefinition(source_format, schema, document=payload, raw_value=raw)

    if source_format is SourceFormat.COMPACT_DEFINITION:
        _LOGGER.debug("Detected compact schema definition")
        schema = _build_schema(raw, lambda: schema_from_compact_definition(payload, policy=policy))
        return _canonical(source_format, schema, raw)

    if source_format is SourceFormat.PROPERTIES_DOCUMENT:
        _LOGGER.debug("Detected schema properties document, reverse-mapping field types")
        schema = _build_schema(raw, lambda: schema_from_properties(payload, policy=policy))
        return _canonical(source_format, schema, raw)

    if source_format is SourceFormat.RAW_JSON:
        if settings.strict:
            raise ParseError("Unrecognized schema definition format", raw)
        _LOGGER.warning("Unrecognized schema definition format, returning parsed JSON as-is")
        document = payload if isinstance(payload, Mapping) else None
        return ParsedDefinition(source_format, None, document=document, raw_value=payload)

    raise AssertionError(f"Unhandled source format: {source_format}")  # pragma: no cover


def schema_from_compact_definition(
    definition: Mapping[str, Any], *, policy: UnknownTypePolicy = "warn"
) -> SchemaDefinition:
    """Build a schema from ``{"name", "description", "fields": [...]}``."""
    raw_fields = definition.get("fields")
    if not isinstance(raw_fields, Sequence) or isinstance(raw_fields, str):
        raise SchemaInvariantError("Compact definition fields must be a list.")

    fields: list[FieldDefinition] = []
    for raw_field in raw_fields:
        if not isinstance(raw_field, Mapping):
            raise SchemaInvariantError("Compact definition fields must be objects.")
        raw_type = raw_field.get("type")
        if not isinstance(raw_type, str) or not raw_type.strip():
            raise SchemaInvariantError(f"Field '{raw_field.get('name')}' must declare a type.")
        validation = raw_field.get("validation")
        if validation is not None and not isinstance(validation, Mapping):
            raise SchemaInvariantError(
                f"Field '{raw_field.get('name')}' validation must be an object."
            )
        fields.append(
            FieldDefinition(
                name=raw_field.get("name"),  # type: ignore[arg-type]
                field_type=resolve_type_token(raw_type, policy=policy),
                optional=bool(raw_field.get("optional", False)),
                description=_optional_text(raw_field.get("description")),
                validation=_validation_from(validation or {}, "min", "max"),
            )
        )
    return SchemaDefinition(
        name=definition.get("name"),  # type: ignore[arg-type]
        description=_optional_text(definition.get("description")),
        fields=tuple(fields),
    )


def schema_from_properties(
    document: Mapping[str, Any], *, policy: UnknownTypePolicy = "warn"
) -> SchemaDefinition:
    """Build a schema from a JSON Schema style ``properties`` document."""
    properties = document.get("properties")
    if not isinstance(properties, Mapping):
        raise SchemaInvariantError("Schema document must define object properties.")
    required = document.get("required") or ()
    if isinstance(required, str) or not isinstance(required, Sequence):
        raise SchemaInvariantError("Schema document 'required' must be a list.")

    fields: list[FieldDefinition] = []
    for name, prop in properties.items():
        if not isinstance(prop, Mapping):
            raise SchemaInvariantError(f"Property '{name}' must be an object.")
        fields.append(
            FieldDefinition(
                name=name,
                field_type=_field_type_for_property(prop, policy),
                optional=name not in required,
                description=_optional_text(prop.get("description")),
                validation=_validation_from(prop, "minimum", "maximum"),
            )
        )
    title = _optional_text(document.get("title"))
    return SchemaDefinition(
        name=title or UNTITLED_SCHEMA_NAME,
        description=_optional_text(document.get("description")),
        fields=tuple(fields),
    )


def compact_definition_for(schema: SchemaDefinition) -> dict[str, Any]:
    """Return the ``{"name", "description", "fields"}`` form of a schema."""
    fields: list[dict[str, Any]] = []
    for definition in schema.fields:
        entry: dict[str, Any] = {
            "name": definition.name,
            "type": type_name(definition.field_type),
            "optional": definition.optional,
        }
        if definition.description:
            entry["description"] = definition.description
        validation = definition.validation
        if validation is not None:
            rules: dict[str, Any] = {}
            if validation.minimum is not None:
                rules["min"] = validation.minimum
            if validation.maximum is not None:
                rules["max"] = validation.maximum
            if validation.pattern is not None:
                rules["pattern"] = validation.pattern
            if validation.allowed_values is not None:
                rules["enum"] = list(validation.allowed_values)
            entry["validation"] = rules
        fields.append(entry)

    result: dict[str, Any] = {"name": schema.name}
    if schema.description:
        result["description"] = schema.description
    result["fields"] = fields
    return result


def _field_type_for_property(prop: Mapping[str, Any], policy: UnknownTypePolicy) -> TypeSpec:
    annotated = prop.get(TYPE_ANNOTATION)
    if isinstance(annotated, str) and annotated.strip():
        return resolve_type_token(annotated, policy=policy)

    format_tag = prop.get("format")
    if isinstance(format_tag, str):
        tagged = type_for_format_tag(format_tag)
        if tagged is not None:
            return tagged

    json_type = _primary_json_type(prop.get("type"))
    if json_type == "string" and _looks_like_address(prop):
        return FieldType.ADDRESS
    if json_type in _JSON_TYPE_TO_FIELD_TYPE:
        return _JSON_TYPE_TO_FIELD_TYPE[json_type]
    if json_type is None:
        return FieldType.STRING
    return resolve_type_token(json_type, policy=policy)


def _primary_json_type(value: Any) -> str | None:
    if isinstance(value, list):
        candidates = [item for item in value if isinstance(item, str) and item != "null"]
        return candidates[0] if candidates else None
    if isinstance(value, str):
        return value
    return None


def _looks_like_address(prop: Mapping[str, Any]) -> bool:
    media_type = prop.get("contentMediaType")
    return prop.get("contentEncoding") == "base32" or (
        isinstance(media_type, str) and media_type.startswith(_ADDRESS_MEDIA_TYPE_PREFIX)
    )


def _validation_from(source: Mapping[str, Any], min_key: str, max_key: str) -> FieldValidation:
    pattern = source.get("pattern")
    allowed = source.get("enum")
    if allowed is not None and (isinstance(allowed, str) or not isinstance(allowed, Sequence)):
        raise SchemaInvariantError("Field 'enum' constraint must be a list.")
    return FieldValidation(
        minimum=_numeric_bound(source.get(min_key), min_key),
        maximum=_numeric_bound(source.get(max_key), max_key),
        pattern=pattern if isinstance(pattern, str) else None,
        allowed_values=tuple(allowed) if allowed else None,
    )


def _numeric_bound(value: Any, key: str) -> int | float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise SchemaInvariantError(f"Field '{key}' constraint must be a number.")
    return value


def _optional_text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _build_schema(raw: Any, build: Callable[[], SchemaDefinition]) -> SchemaDefinition:
    try:
        return build()
    except SchemaInvariantError as exc:
        raise ParseError(str(exc), raw) from exc


def _canonical(source_format: SourceFormat, schema: SchemaDefinition, raw: Any) -> ParsedDefinition:
    return ParsedDefinition(source_format, schema, document=project_schema(schema), raw_value=raw)


def _is_compact_definition(value: Mapping[str, Any]) -> bool:
    name = value.get("name")
    fields = value.get("fields")
    return (
        isinstance(name, str)
        and bool(name.strip())
        and isinstance(fields, list)
        and bool(fields)
    )
