"""Record validation entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ValidationErrorKind(str, Enum):
    """Categories of record validation failures."""

    MISSING = "missing"
    TYPE = "type"
    FORMAT = "format"
    RANGE = "range"
    PATTERN = "pattern"
    ENUM = "enum"
    UNSUPPORTED_TYPE = "unsupported_type"


@dataclass(frozen=True)
class ValidationError:
    """One reason a record does not conform to a schema."""

    field: str
    message: str
    kind: ValidationErrorKind

    def __str__(self) -> str:
        return self.message
