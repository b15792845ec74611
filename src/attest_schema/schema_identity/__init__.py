"""Schema identity exports."""

from .uid_generator import (
    UID_LENGTH,
    SchemaUid,
    UidEncoding,
    UidFormatError,
    canonical_schema_bytes,
    format_uid,
    generate_schema_uid,
    parse_formatted_uid,
)

__all__ = [
    "SchemaUid",
    "UID_LENGTH",
    "UidEncoding",
    "UidFormatError",
    "canonical_schema_bytes",
    "format_uid",
    "generate_schema_uid",
    "parse_formatted_uid",
]
