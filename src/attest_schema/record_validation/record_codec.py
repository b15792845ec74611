"""Default records and the validated record payload codec."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from attest_schema.schema_identity import SchemaUid, generate_schema_uid
from attest_schema.schema_management.schema_models import SchemaDefinition
from attest_schema.type_system import FieldType, ParameterizedType, TypeSpec

from .domain_formats import parse_amount
from .record_validator import validate_record
from .validation_outcomes import ValidationError

_LOGGER = logging.getLogger(__name__)

# Account StrKey of the all-zero public key.
ZERO_ADDRESS = "GAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAWHF"
_SIGNED_DIGITS = re.compile(r"-?\d+")


class RecordCodecError(ValueError):
    """Raised when a record payload cannot be produced or read back."""


class RecordRejectedError(RecordCodecError):
    """Raised when a record fails validation before encoding."""

    def __init__(self, errors: list[ValidationError]) -> None:
        summary = "; ".join(error.message for error in errors)
        super().__init__(f"Record rejected with {len(errors)} error(s): {summary}")
        self.errors = errors


@dataclass(frozen=True)
class EncodedRecord:
    """Serialized record tagged with the UID of the schema it was checked against."""

    schema_uid: SchemaUid
    payload: str
    record: dict[str, Any]


def generate_defaults(
    schema: SchemaDefinition, *, now: datetime | None = None
) -> dict[str, Any]:
    """Return a record holding a placeholder value for every required field.

    Optional fields are left out. Time based fields use ``now`` (the current UTC time when
    omitted). Fields of unknown type default to None.
    """
    moment = now or datetime.now(UTC)
    return {
        definition.name: _default_for(definition.field_type, moment)
        for definition in schema.fields
        if not definition.optional
    }


def encode_record(schema: SchemaDefinition, record: Mapping[str, Any]) -> EncodedRecord:
    """Validate ``record``, then serialize its declared fields to compact JSON.

    Timestamps become epoch seconds, amounts and large integers travel as strings where
    JSON would lose precision, and bytes become hex.
    """
    errors = validate_record(schema, record)
    if errors:
        raise RecordRejectedError(errors)

    prepared: dict[str, Any] = {}
    for definition in schema.fields:
        if definition.name not in record:
            continue
        prepared[definition.name] = _prepare_value(definition.field_type, record[definition.name])

    payload = json.dumps(prepared, separators=(",", ":"), ensure_ascii=False)
    schema_uid = generate_schema_uid(schema)
    _LOGGER.debug("Encoded record for schema %s (%d bytes)", schema_uid, len(payload))
    return EncodedRecord(schema_uid=schema_uid, payload=payload, record=prepared)


def decode_record(
    schema: SchemaDefinition, payload: str, *, schema_uid: SchemaUid | str | None = None
) -> dict[str, Any]:
    """Read a payload produced by :func:`encode_record` back into a record.

    When ``schema_uid`` is given it must match the UID of ``schema``. Keys the schema does
    not declare are kept as-is.
    """
    if schema_uid is not None:
        expected = generate_schema_uid(schema)
        if str(schema_uid).lower() != expected.hex():
            raise RecordCodecError(
                f"Payload was encoded for schema {schema_uid}, not {expected.hex()}"
            )
    try:
        decoded = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise RecordCodecError(f"Record payload is not valid JSON: {exc}") from exc
    if not isinstance(decoded, dict):
        raise RecordCodecError("Record payload must be a JSON object.")

    for definition in schema.fields:
        if definition.name in decoded:
            decoded[definition.name] = _restore_value(
                definition.field_type, decoded[definition.name]
            )
    return decoded


def _default_for(field_type: TypeSpec, moment: datetime) -> Any:
    if isinstance(field_type, ParameterizedType):
        if field_type.is_option:
            return None
        return [] if field_type.container == "array" else {}
    if not isinstance(field_type, FieldType):
        return None
    if field_type is FieldType.BOOLEAN:
        return False
    if field_type is FieldType.CHAR:
        return " "
    if field_type in (FieldType.STRING, FieldType.BYTES):
        return ""
    if field_type is FieldType.SYMBOL:
        return "_"
    if field_type is FieldType.ADDRESS:
        return ZERO_ADDRESS
    if field_type is FieldType.TIMESTAMP:
        return int(moment.timestamp())
    if field_type is FieldType.DATETIME:
        return moment.isoformat()
    if field_type is FieldType.ARRAY:
        return []
    if field_type is FieldType.MAP:
        return {}
    # integers, floats and amounts
    return 0


def _prepare_value(field_type: TypeSpec, value: Any) -> Any:
    if isinstance(field_type, ParameterizedType):
        if value is None:
            return None
        if field_type.is_option:
            return _prepare_value(field_type.arguments[0], value)
        if field_type.container == "array":
            return [_prepare_value(field_type.arguments[0], item) for item in value]
        return {
            str(key): _prepare_value(field_type.arguments[1], item) for key, item in value.items()
        }
    if field_type is FieldType.TIMESTAMP:
        return _epoch_seconds(value)
    if field_type is FieldType.AMOUNT and not isinstance(value, int):
        return str(value)
    if field_type is FieldType.INT128 and isinstance(value, int):
        return str(value)
    if isinstance(value, bytes | bytearray):
        return value.hex()
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, tuple):
        return list(value)
    return value


def _restore_value(field_type: TypeSpec, value: Any) -> Any:
    if isinstance(field_type, ParameterizedType):
        if value is None:
            return None
        if field_type.is_option:
            return _restore_value(field_type.arguments[0], value)
        if field_type.container == "array" and isinstance(value, list):
            return [_restore_value(field_type.arguments[0], item) for item in value]
        if field_type.container == "map" and isinstance(value, dict):
            return {
                key: _restore_value(field_type.arguments[1], item) for key, item in value.items()
            }
        return value
    if field_type is FieldType.AMOUNT and isinstance(value, str):
        amount = parse_amount(value)
        return value if amount is None else amount
    if field_type is FieldType.INT128 and isinstance(value, str):
        return int(value) if _SIGNED_DIGITS.fullmatch(value) else value
    return value


def _epoch_seconds(value: Any) -> int:
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str) and not value.strip().isdigit():
        moment = datetime.fromisoformat(value.strip())
    else:
        return int(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return int(moment.timestamp())
