"""Compact codec exports."""

from .compact_table_codec import (
    ENTRY_SEPARATOR,
    CompactCodecError,
    compact_table_for,
    decode_compact,
    encode_compact,
    schema_from_compact,
)

__all__ = [
    "CompactCodecError",
    "ENTRY_SEPARATOR",
    "compact_table_for",
    "decode_compact",
    "encode_compact",
    "schema_from_compact",
]
