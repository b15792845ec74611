"""Canonical schema entities."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from attest_schema.type_system import ParameterizedType, TypeSpec


class SchemaInvariantError(ValueError):
    """Raised when a schema definition violates its structural invariants."""


@dataclass(frozen=True)
class FieldValidation:
    """Optional value constraints attached to a field."""

    minimum: int | float | None = None
    maximum: int | float | None = None
    pattern: str | None = None
    allowed_values: tuple[object, ...] | None = None

    @property
    def is_empty(self) -> bool:
        """Return True when no constraint is set."""
        return (
            self.minimum is None
            and self.maximum is None
            and self.pattern is None
            and self.allowed_values is None
        )


@dataclass(frozen=True)
class FieldDefinition:
    """One named, typed field of a schema.

    ``field_type`` holds a catalog :class:`FieldType`, a :class:`ParameterizedType`
    container or, for tokens the catalog does not know, the raw token string.
    """

    name: str
    field_type: TypeSpec
    optional: bool = False
    description: str | None = None
    validation: FieldValidation | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise SchemaInvariantError("Each field must have a non-empty name.")
        if not isinstance(self.field_type, ParameterizedType) and (
            not isinstance(self.field_type, str) or not self.field_type
        ):
            raise SchemaInvariantError(f"Field '{self.name}' must declare a type.")
        if self.validation is not None and self.validation.is_empty:
            object.__setattr__(self, "validation", None)


@dataclass(frozen=True, eq=False)
class SchemaDefinition:
    """Normalized, format-independent schema.

    Field order is kept for serialization but ignored by equality.
    """

    name: str
    fields: tuple[FieldDefinition, ...]
    description: str | None = None
    _by_name: dict[str, FieldDefinition] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise SchemaInvariantError("Schema must have a non-empty name.")
        fields = tuple(self.fields)
        if not fields:
            raise SchemaInvariantError("Schema must have at least one field.")
        by_name: dict[str, FieldDefinition] = {}
        for definition in fields:
            if definition.name in by_name:
                raise SchemaInvariantError(f"Duplicate field name: {definition.name}")
            by_name[definition.name] = definition
        object.__setattr__(self, "fields", fields)
        object.__setattr__(self, "_by_name", by_name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SchemaDefinition):
            return NotImplemented
        return (
            self.name == other.name
            and self.description == other.description
            and self._by_name == other._by_name
        )

    def __hash__(self) -> int:
        return hash((self.name, self.description, frozenset(self.fields)))

    def __iter__(self) -> Iterator[FieldDefinition]:
        return iter(self.fields)

    @property
    def field_names(self) -> tuple[str, ...]:
        """Field names in declaration order."""
        return tuple(definition.name for definition in self.fields)

    def get_field(self, name: str) -> FieldDefinition | None:
        """Return the field with the given name, if declared."""
        return self._by_name.get(name)
