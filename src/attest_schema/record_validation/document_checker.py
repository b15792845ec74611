"""Record checks through the projected JSON Schema document.

Generic JSON Schema tooling only knows the projected document; this module wires the
custom ``stellar-*`` formats into a ``jsonschema`` validator so such tooling reaches the
same verdicts as :func:`validate_record` for the projected subset of constraints.
"""

from __future__ import annotations

from collections.abc import Mapping

from jsonschema import Draft202012Validator, FormatChecker
from jsonschema.exceptions import ValidationError as DocumentError

from attest_schema.schema_management.schema_models import SchemaDefinition
from attest_schema.schema_management.schema_projection import project_schema
from attest_schema.type_system import INTEGER_BOUNDS, FieldType

from .domain_formats import is_valid_address, is_valid_timestamp, parse_amount
from .validation_outcomes import ValidationError, ValidationErrorKind

_KEYWORD_KINDS = {
    "required": ValidationErrorKind.MISSING,
    "type": ValidationErrorKind.TYPE,
    "format": ValidationErrorKind.FORMAT,
    "minimum": ValidationErrorKind.RANGE,
    "maximum": ValidationErrorKind.RANGE,
    "pattern": ValidationErrorKind.PATTERN,
    "enum": ValidationErrorKind.ENUM,
}


def build_format_checker() -> FormatChecker:
    """Return a format checker that understands the ``stellar-*`` format tags."""
    checker = FormatChecker()
    checker.checks("stellar-address")(
        lambda value: not isinstance(value, str) or is_valid_address(value)
    )
    checker.checks("stellar-amount")(_check_amount)
    checker.checks("stellar-timestamp")(_check_timestamp)
    checker.checks("stellar-i128")(_check_i128)
    return checker


def build_document_validator(schema: SchemaDefinition) -> Draft202012Validator:
    """Return a JSON Schema validator for the projection of ``schema``."""
    return Draft202012Validator(project_schema(schema), format_checker=build_format_checker())


def check_with_document(
    schema: SchemaDefinition, record: Mapping[str, object]
) -> list[ValidationError]:
    """Validate ``record`` with the projected document, in field declaration order."""
    validator = build_document_validator(schema)
    order = {name: index for index, name in enumerate(schema.field_names)}
    errors = [_convert(error) for error in validator.iter_errors(dict(record))]
    return sorted(errors, key=lambda error: order.get(error.field, len(order)))


def _convert(error: DocumentError) -> ValidationError:
    keyword = str(error.validator)
    kind = _KEYWORD_KINDS.get(keyword, ValidationErrorKind.FORMAT)
    if keyword == "required":
        name = _missing_property(error)
        return ValidationError(field=name, message=f"Required field '{name}' is missing", kind=kind)

    name = str(error.absolute_path[0]) if error.absolute_path else ""
    messages = {
        "type": f"Field '{name}' must be of type {error.validator_value}",
        "format": f"Field '{name}' has invalid format",
        "minimum": f"Field '{name}' is below minimum value {error.validator_value}",
        "maximum": f"Field '{name}' exceeds maximum value {error.validator_value}",
        "pattern": f"Field '{name}' does not match pattern {error.validator_value!r}",
    }
    return ValidationError(field=name, message=messages.get(keyword, error.message), kind=kind)


def _missing_property(error: DocumentError) -> str:
    for name in error.validator_value or ():
        if error.message == f"{name!r} is a required property":
            return str(name)
    return ""


def _check_amount(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        return True
    return parse_amount(value) is not None


def _check_timestamp(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | str):
        return True
    return is_valid_timestamp(value)


def _check_i128(value: object) -> bool:
    if not isinstance(value, int) or isinstance(value, bool):
        return True
    lower, upper = INTEGER_BOUNDS[FieldType.INT128]
    return lower <= value <= upper
