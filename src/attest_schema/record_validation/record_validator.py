"""Validation of candidate records against canonical schemas."""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from decimal import Decimal

from attest_schema.schema_management.schema_models import (
    FieldDefinition,
    FieldValidation,
    SchemaDefinition,
)
from attest_schema.type_system import (
    INTEGER_BOUNDS,
    FieldType,
    ParameterizedType,
    TypeSpec,
    type_name,
)

from .domain_formats import (
    is_valid_address,
    is_valid_bytes,
    is_valid_datetime,
    is_valid_symbol,
    is_valid_timestamp,
    parse_amount,
)
from .validation_outcomes import ValidationError, ValidationErrorKind

_FORMAT_CHECKS: Mapping[FieldType, Callable[[object], bool]] = {
    FieldType.ADDRESS: is_valid_address,
    FieldType.AMOUNT: lambda value: parse_amount(value) is not None,
    FieldType.TIMESTAMP: is_valid_timestamp,
    FieldType.DATETIME: is_valid_datetime,
    FieldType.SYMBOL: is_valid_symbol,
    FieldType.BYTES: is_valid_bytes,
}


def validate_record(
    schema: SchemaDefinition, record: Mapping[str, object]
) -> list[ValidationError]:
    """Return every way ``record`` violates ``schema``; an empty list accepts it.

    Fields are checked in declaration order and every field is visited. Keys the schema
    does not declare are ignored. A null value counts as absent unless the field type is
    ``option<...>``, where an explicit null is accepted.
    """
    errors: list[ValidationError] = []
    for definition in schema.fields:
        value = record.get(definition.name)
        if value is None and _accepts_null(definition, record):
            continue
        if value is None:
            if not definition.optional:
                errors.append(
                    ValidationError(
                        field=definition.name,
                        message=f"Required field '{definition.name}' is missing",
                        kind=ValidationErrorKind.MISSING,
                    )
                )
            continue
        error = _check_field(definition, value)
        if error is not None:
            errors.append(error)
    return errors


def _check_field(definition: FieldDefinition, value: object) -> ValidationError | None:
    field_type = definition.field_type
    name = definition.name
    if not _is_catalogued(field_type):
        return ValidationError(
            field=name,
            message=f"Field '{name}' has unsupported type '{type_name(field_type)}'",
            kind=ValidationErrorKind.UNSUPPORTED_TYPE,
        )
    if not _matches(field_type, value, check_formats=False):
        return ValidationError(
            field=name,
            message=f"Field '{name}' must be of type {type_name(field_type)}",
            kind=ValidationErrorKind.TYPE,
        )
    if not _matches(field_type, value, check_formats=True):
        return ValidationError(
            field=name,
            message=f"Field '{name}' has invalid format",
            kind=ValidationErrorKind.FORMAT,
        )
    if definition.validation is None:
        return None
    return _check_rules(definition, definition.validation, value)


def _check_rules(
    definition: FieldDefinition, rules: FieldValidation, value: object
) -> ValidationError | None:
    name = definition.name

    number = _numeric_value(definition.field_type, value)
    if number is not None:
        if rules.minimum is not None and number < rules.minimum:
            return ValidationError(
                field=name,
                message=f"Field '{name}' is below minimum value {rules.minimum}",
                kind=ValidationErrorKind.RANGE,
            )
        if rules.maximum is not None and number > rules.maximum:
            return ValidationError(
                field=name,
                message=f"Field '{name}' exceeds maximum value {rules.maximum}",
                kind=ValidationErrorKind.RANGE,
            )

    if rules.pattern is not None and isinstance(value, str):
        try:
            matched = re.search(rules.pattern, value) is not None
        except re.error:
            matched = False
        if not matched:
            return ValidationError(
                field=name,
                message=f"Field '{name}' does not match pattern {rules.pattern!r}",
                kind=ValidationErrorKind.PATTERN,
            )

    if rules.allowed_values is not None and value not in rules.allowed_values:
        allowed = ", ".join(str(item) for item in rules.allowed_values)
        return ValidationError(
            field=name,
            message=f"Field '{name}' must be one of: {allowed}",
            kind=ValidationErrorKind.ENUM,
        )
    return None


def _accepts_null(definition: FieldDefinition, record: Mapping[str, object]) -> bool:
    field_type = definition.field_type
    return (
        isinstance(field_type, ParameterizedType)
        and field_type.is_option
        and definition.name in record
    )


def _is_catalogued(field_type: TypeSpec) -> bool:
    if isinstance(field_type, ParameterizedType):
        return all(_is_catalogued(argument) for argument in field_type.arguments)
    return isinstance(field_type, FieldType)


def _matches(field_type: TypeSpec, value: object, *, check_formats: bool) -> bool:
    """Check ``value`` against a type, descending into container elements."""
    if isinstance(field_type, ParameterizedType):
        return _matches_container(field_type, value, check_formats=check_formats)
    if not isinstance(field_type, FieldType) or not _matches_type(field_type, value):
        return False
    if not check_formats:
        return True
    format_check = _FORMAT_CHECKS.get(field_type)
    return format_check is None or format_check(value)


def _matches_container(
    field_type: ParameterizedType, value: object, *, check_formats: bool
) -> bool:
    arguments = field_type.arguments
    if field_type.is_option:
        return value is None or _matches(arguments[0], value, check_formats=check_formats)
    if field_type.container == "array":
        if isinstance(value, str | bytes) or not isinstance(value, Sequence):
            return False
        return all(_matches(arguments[0], item, check_formats=check_formats) for item in value)
    if not isinstance(value, Mapping):
        return False
    key_type, value_type = arguments
    return all(
        _matches(key_type, key, check_formats=check_formats)
        and _matches(value_type, item, check_formats=check_formats)
        for key, item in value.items()
    )


def _matches_type(field_type: FieldType, value: object) -> bool:
    if field_type is FieldType.BOOLEAN:
        return isinstance(value, bool)
    if isinstance(value, bool):
        return False
    if field_type in INTEGER_BOUNDS:
        lower, upper = INTEGER_BOUNDS[field_type]
        return isinstance(value, int) and lower <= value <= upper
    if field_type is FieldType.CHAR:
        return isinstance(value, str) and len(value) == 1
    if field_type in (FieldType.STRING, FieldType.SYMBOL, FieldType.ADDRESS):
        return isinstance(value, str)
    if field_type in (FieldType.FLOAT, FieldType.DOUBLE):
        return isinstance(value, int) or (isinstance(value, float) and math.isfinite(value))
    if field_type is FieldType.AMOUNT:
        return isinstance(value, int | float | str | Decimal)
    if field_type is FieldType.TIMESTAMP:
        return isinstance(value, int | str | datetime)
    if field_type is FieldType.DATETIME:
        return isinstance(value, str | datetime)
    if field_type is FieldType.BYTES:
        return isinstance(value, bytes | bytearray | str)
    if field_type is FieldType.ARRAY:
        return isinstance(value, list | tuple)
    if field_type is FieldType.MAP:
        return isinstance(value, Mapping)
    return False


def _numeric_value(field_type: TypeSpec, value: object) -> int | float | Decimal | None:
    if isinstance(field_type, ParameterizedType) and field_type.is_option:
        return _numeric_value(field_type.arguments[0], value)
    if field_type is FieldType.AMOUNT:
        return parse_amount(value)
    if isinstance(value, int | float) and not isinstance(value, bool):
        return value
    return None
