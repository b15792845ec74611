"""Type system exports."""

from .field_types import (
    INTEGER_BOUNDS,
    SHORT_CODES,
    FieldType,
    ParameterizedType,
    TypeSpec,
    UnknownTypePolicy,
    UnsupportedFormatError,
    decode_type,
    decode_type_code,
    encode_type,
    format_tag_for,
    is_known_type,
    json_type_for,
    lookup_type_token,
    resolve_type_token,
    type_code,
    type_for_format_tag,
    type_name,
)

__all__ = [
    "FieldType",
    "INTEGER_BOUNDS",
    "ParameterizedType",
    "SHORT_CODES",
    "TypeSpec",
    "UnknownTypePolicy",
    "UnsupportedFormatError",
    "decode_type",
    "decode_type_code",
    "encode_type",
    "format_tag_for",
    "is_known_type",
    "json_type_for",
    "lookup_type_token",
    "resolve_type_token",
    "type_code",
    "type_for_format_tag",
    "type_name",
]
