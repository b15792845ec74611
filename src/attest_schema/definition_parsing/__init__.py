"""Definition parsing exports."""

from .binary_schema_codec import BINARY_SCHEMA_TAG, decode_binary_schema, encode_binary_schema
from .format_detection import (
    UNTITLED_SCHEMA_NAME,
    classify_definition,
    compact_definition_for,
    parse_definition,
    schema_from_compact_definition,
    schema_from_properties,
)
from .source_formats import (
    BinaryDecodeError,
    ClassifiedDefinition,
    ParsedDefinition,
    ParseError,
    SourceFormat,
)

__all__ = [
    "BINARY_SCHEMA_TAG",
    "BinaryDecodeError",
    "ClassifiedDefinition",
    "ParseError",
    "ParsedDefinition",
    "SourceFormat",
    "UNTITLED_SCHEMA_NAME",
    "classify_definition",
    "compact_definition_for",
    "decode_binary_schema",
    "encode_binary_schema",
    "parse_definition",
    "schema_from_compact_definition",
    "schema_from_properties",
]
