"""Source format classification entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from attest_schema.schema_management.schema_models import SchemaDefinition

_ECHO_LIMIT = 120


class ParseError(Exception):
    """Raised when a raw schema definition cannot be normalized."""

    def __init__(self, message: str, source: object = None) -> None:
        self.reason = message
        self.source = source
        if source is not None:
            message = f"{message} (input: {_echo(source)})"
        super().__init__(message)


class BinaryDecodeError(ParseError):
    """Raised when a binary-encoded schema payload is malformed."""


class SourceFormat(str, Enum):
    """Encodings a schema definition can arrive in."""

    BINARY_ENCODED = "binary"
    SCHEMA_DOCUMENT = "schema_document"
    COMPACT_DEFINITION = "compact_definition"
    PROPERTIES_DOCUMENT = "properties_document"
    RAW_JSON = "raw_json"


@dataclass(frozen=True)
class ClassifiedDefinition:
    """Raw definition tagged with its detected source format.

    ``payload`` is the tag-stripped text for binary input and the decoded JSON value
    for every other format.
    """

    source_format: SourceFormat
    payload: Any


@dataclass(frozen=True)
class ParsedDefinition:
    """Outcome of normalizing one raw definition."""

    source_format: SourceFormat
    schema: SchemaDefinition | None
    document: Mapping[str, Any] | None = None
    raw_value: Any = None

    @property
    def is_canonical(self) -> bool:
        """Return True when the definition could be normalized into a schema."""
        return self.schema is not None

    def require_schema(self) -> SchemaDefinition:
        """Return the canonical schema or raise for unrecognized definitions."""
        if self.schema is None:
            raise ParseError("Unrecognized schema definition format", self.raw_value)
        return self.schema


def _echo(source: object) -> str:
    text = source if isinstance(source, str) else repr(source)
    if len(text) > _ECHO_LIMIT:
        return f"{text[:_ECHO_LIMIT]}..."
    return text
