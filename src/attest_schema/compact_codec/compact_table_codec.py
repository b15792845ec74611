"""Compact ``<code> <name>, ...`` encoding of field type tables."""

from __future__ import annotations

from collections.abc import Mapping

from attest_schema.schema_management.schema_models import (
    FieldDefinition,
    SchemaDefinition,
    SchemaInvariantError,
)
from attest_schema.type_system import (
    SHORT_CODES,
    TypeSpec,
    decode_type_code,
    is_known_type,
    lookup_type_token,
    type_code,
)

ENTRY_SEPARATOR = ", "


class CompactCodecError(ValueError):
    """Raised when a table cannot be encoded or a compact string cannot be decoded."""


def encode_compact(table: Mapping[str, TypeSpec]) -> str:
    """Encode a name-to-type table, in the mapping's iteration order.

    Plain string tokens naming a catalog type (``"uint32"``, ``"bool"``) are written as
    their short code; other strings are written verbatim. Names that would not survive
    :func:`decode_compact` unchanged are rejected.
    """
    entries = []
    for name, field_type in table.items():
        _check_encodable_name(name)
        if isinstance(field_type, str) and not is_known_type(field_type):
            field_type = lookup_type_token(field_type) or field_type
        code = type_code(field_type)
        if not code or " " in code or code.endswith(","):
            raise CompactCodecError(f"Type token {code!r} of field {name!r} cannot be encoded.")
        entries.append(f"{code} {name}")
    return ENTRY_SEPARATOR.join(entries)


def decode_compact(text: str) -> dict[str, TypeSpec]:
    """Decode a compact string.

    Only short codes are resolved; any other token, including a verbose type name, is
    kept as-is.
    """
    table: dict[str, TypeSpec] = {}
    if not text.strip():
        return table
    for chunk in text.split(ENTRY_SEPARATOR):
        code, separator, name = chunk.partition(" ")
        if not separator or not code or not name:
            raise CompactCodecError(f"Malformed compact entry: {chunk!r}")
        if name in table:
            raise CompactCodecError(f"Duplicate field name in compact string: {name!r}")
        table[name] = decode_type_code(code)
    return table


def compact_table_for(schema: SchemaDefinition) -> dict[str, TypeSpec]:
    """Return the name-to-type table of a schema in declaration order."""
    return {definition.name: definition.field_type for definition in schema.fields}


def schema_from_compact(
    name: str, text: str, *, description: str | None = None
) -> SchemaDefinition:
    """Build a schema with required fields from a compact string."""
    try:
        return SchemaDefinition(
            name=name,
            description=description,
            fields=tuple(
                FieldDefinition(name=field_name, field_type=field_type)
                for field_name, field_type in decode_compact(text).items()
            ),
        )
    except SchemaInvariantError as exc:
        raise CompactCodecError(str(exc)) from exc


def _check_encodable_name(name: str) -> None:
    if not isinstance(name, str) or not name:
        raise CompactCodecError("Field names must be non-empty strings.")
    if name != name.strip():
        raise CompactCodecError(f"Field name {name!r} has surrounding whitespace.")
    if ENTRY_SEPARATOR in name:
        raise CompactCodecError(f"Field name {name!r} contains the entry separator.")
    if name in SHORT_CODES:
        raise CompactCodecError(f"Field name {name!r} collides with a type code.")
