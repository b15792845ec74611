"""Binary (XDR) schema encoding and decoding."""

from __future__ import annotations

import base64
import binascii
import struct
from collections.abc import Mapping, Sequence
from typing import Any

from attest_schema.schema_management.schema_models import (
    FieldDefinition,
    FieldValidation,
    SchemaDefinition,
    SchemaInvariantError,
)
from attest_schema.type_system import UnknownTypePolicy, resolve_type_token, type_name

from .source_formats import BinaryDecodeError

BINARY_SCHEMA_TAG = "XDR:"

# ScVal discriminants of the Soroban XDR definitions.
_SCV_BOOL = 0
_SCV_VOID = 1
_SCV_U32 = 3
_SCV_I32 = 4
_SCV_U64 = 5
_SCV_I64 = 6
_SCV_TIMEPOINT = 7
_SCV_DURATION = 8
_SCV_U128 = 9
_SCV_I128 = 10
_SCV_BYTES = 13
_SCV_STRING = 14
_SCV_SYMBOL = 15
_SCV_VEC = 16
_SCV_MAP = 17

_UINT64_MASK = 2**64 - 1
_MAX_NESTING = 16
# Map key wrapping non-integral floats, which have no ScVal of their own.
_FLOAT_KEY = "float"


def encode_binary_schema(schema: SchemaDefinition, *, tag: str = BINARY_SCHEMA_TAG) -> str:
    """Encode a schema as a tagged base64 XDR ``ScVal`` map."""
    writer = _XdrWriter()
    entries: list[tuple[str, Any]] = [("name", schema.name)]
    if schema.description:
        entries.append(("description", schema.description))
    entries.append(("fields", [_Map(_field_entries(definition)) for definition in schema.fields]))
    writer.write_map(entries)
    return f"{tag}{base64.b64encode(writer.getvalue()).decode('ascii')}"


def decode_binary_schema(
    text: str,
    *,
    tag: str = BINARY_SCHEMA_TAG,
    unknown_types: UnknownTypePolicy = "warn",
) -> SchemaDefinition:
    """Decode a tagged base64 XDR payload into a schema definition."""
    if not text.startswith(tag):
        raise BinaryDecodeError(f"Binary schema must start with {tag!r}", text)
    try:
        payload = base64.b64decode(text[len(tag) :].strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise BinaryDecodeError(f"Binary schema payload is not valid base64: {exc}", text) from exc

    reader = _XdrReader(payload)
    root = reader.read_value()
    if reader.remaining:
        raise BinaryDecodeError(f"{reader.remaining} trailing bytes after schema payload", text)
    if not isinstance(root, dict):
        raise BinaryDecodeError("Binary schema payload is not a map", text)

    fields = root.get("fields")
    if not isinstance(fields, list):
        raise BinaryDecodeError("Binary schema payload has no field list", text)
    try:
        return SchemaDefinition(
            name=_optional_str(root.get("name")) or "",
            description=_optional_str(root.get("description")),
            fields=tuple(_decode_field(item, unknown_types) for item in fields),
        )
    except (SchemaInvariantError, TypeError) as exc:
        raise BinaryDecodeError(f"Invalid binary schema: {exc}", text) from exc


def _field_entries(definition: FieldDefinition) -> list[tuple[str, Any]]:
    entries: list[tuple[str, Any]] = [
        ("name", definition.name),
        ("type", type_name(definition.field_type)),
        ("optional", definition.optional),
    ]
    if definition.description:
        entries.append(("description", definition.description))
    validation = definition.validation
    if validation is not None:
        rules: list[tuple[str, Any]] = []
        if validation.minimum is not None:
            rules.append(("min", _Bound(validation.minimum)))
        if validation.maximum is not None:
            rules.append(("max", _Bound(validation.maximum)))
        if validation.pattern is not None:
            rules.append(("pattern", validation.pattern))
        if validation.allowed_values is not None:
            rules.append(("enum", [_enum_member(value) for value in validation.allowed_values]))
        entries.append(("validation", _Map(rules)))
    return entries


def _decode_field(item: Any, unknown_types: UnknownTypePolicy) -> FieldDefinition:
    if not isinstance(item, dict):
        raise TypeError("field entries must be maps")
    name = _optional_str(item.get("name"))
    raw_type = _optional_str(item.get("type"))
    if not name or not raw_type:
        raise TypeError("fields require a name and a type")
    optional = item.get("optional", False)
    return FieldDefinition(
        name=name,
        field_type=resolve_type_token(raw_type, policy=unknown_types),
        optional=optional if isinstance(optional, bool) else False,
        description=_optional_str(item.get("description")),
        validation=_decode_validation(item.get("validation")),
    )


def _decode_validation(value: Any) -> FieldValidation | None:
    if not isinstance(value, dict):
        return None
    allowed = value.get("enum")
    pattern = value.get("pattern")
    return FieldValidation(
        minimum=_decode_bound(value.get("min")),
        maximum=_decode_bound(value.get("max")),
        pattern=pattern if isinstance(pattern, str) else None,
        allowed_values=(
            tuple(_decode_member(item) for item in allowed)
            if isinstance(allowed, list) and allowed
            else None
        ),
    )


def _enum_member(value: Any) -> Any:
    if value is None or isinstance(value, bool | str):
        return value
    if isinstance(value, int):
        return _Bound(value)
    if isinstance(value, float):
        if value.is_integer():
            return _Bound(int(value))
        return _Map([(_FLOAT_KEY, repr(value))])
    if isinstance(value, Mapping):
        return _Map([(str(key), _enum_member(item)) for key, item in value.items()])
    if isinstance(value, Sequence):
        return [_enum_member(item) for item in value]
    return str(value)


def _decode_member(value: Any) -> Any:
    if isinstance(value, dict):
        if set(value) == {_FLOAT_KEY} and isinstance(value[_FLOAT_KEY], str):
            try:
                return float(value[_FLOAT_KEY])
            except ValueError as exc:
                raise TypeError(f"invalid enum member {value!r}") from exc
        return {key: _decode_member(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_decode_member(item) for item in value]
    return value


def _decode_bound(value: Any) -> int | float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError as exc:
            raise TypeError(f"invalid numeric bound {value!r}") from exc
    return None


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


class _Bound:
    """Numeric bound; integral values travel as i128, others as decimal strings."""

    def __init__(self, value: int | float) -> None:
        self.value = value


class _Map:
    """Ordered ScVal map entries keyed by symbol."""

    def __init__(self, entries: Sequence[tuple[str, Any]]) -> None:
        self.entries = entries


class _XdrWriter:
    """Writer for the subset of ScVal used by schema payloads."""

    def __init__(self) -> None:
        self._chunks: list[bytes] = []

    def getvalue(self) -> bytes:
        """Return the bytes written so far."""
        return b"".join(self._chunks)

    def write_value(self, value: Any) -> None:
        """Write one ScVal inferred from a Python value."""
        if value is None:
            self._write_int32(_SCV_VOID)
        elif isinstance(value, bool):
            self._write_int32(_SCV_BOOL)
            self._write_int32(1 if value else 0)
        elif isinstance(value, str):
            self._write_int32(_SCV_STRING)
            self._write_opaque(value.encode("utf-8"))
        elif isinstance(value, _Bound):
            self._write_bound(value.value)
        elif isinstance(value, _Map):
            self.write_map(value.entries)
        elif isinstance(value, Sequence):
            self._write_int32(_SCV_VEC)
            self._write_uint32(1)
            self._write_uint32(len(value))
            for item in value:
                self.write_value(item)
        else:
            raise TypeError(f"Cannot encode {type(value).__name__} as ScVal")

    def write_map(self, entries: Sequence[tuple[str, Any]]) -> None:
        """Write an ScVal map with symbol keys."""
        self._write_int32(_SCV_MAP)
        self._write_uint32(1)
        self._write_uint32(len(entries))
        for key, value in entries:
            self._write_int32(_SCV_SYMBOL)
            self._write_opaque(key.encode("ascii"))
            self.write_value(value)

    def _write_bound(self, value: int | float) -> None:
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if isinstance(value, int):
            self._write_int32(_SCV_I128)
            self._chunks.append(struct.pack(">qQ", value >> 64, value & _UINT64_MASK))
            return
        self._write_int32(_SCV_STRING)
        self._write_opaque(repr(value).encode("ascii"))

    def _write_int32(self, value: int) -> None:
        self._chunks.append(struct.pack(">i", value))

    def _write_uint32(self, value: int) -> None:
        self._chunks.append(struct.pack(">I", value))

    def _write_opaque(self, data: bytes) -> None:
        self._write_uint32(len(data))
        self._chunks.append(data)
        padding = (4 - len(data) % 4) % 4
        if padding:
            self._chunks.append(b"\x00" * padding)


class _XdrReader:
    """Reader for the subset of ScVal used by schema payloads."""

    def __init__(self, payload: bytes) -> None:
        self._data = payload
        self._offset = 0
        self._depth = 0

    @property
    def remaining(self) -> int:
        """Number of unread bytes."""
        return len(self._data) - self._offset

    def read_exact(self, size: int) -> bytes:
        """Read exactly `size` bytes or raise BinaryDecodeError."""
        end = self._offset + size
        if size < 0 or end > len(self._data):
            raise BinaryDecodeError("Unexpected end of binary schema payload.")
        chunk = self._data[self._offset : end]
        self._offset = end
        return chunk

    def read_value(self) -> Any:
        """Read one ScVal and return its Python equivalent."""
        self._depth += 1
        if self._depth > _MAX_NESTING:
            raise BinaryDecodeError("Binary schema payload is nested too deeply.")
        try:
            return self._read_tagged(self._read_int32())
        finally:
            self._depth -= 1

    def _read_tagged(self, discriminant: int) -> Any:
        if discriminant == _SCV_BOOL:
            return self._read_int32() != 0
        if discriminant == _SCV_VOID:
            return None
        if discriminant == _SCV_U32:
            return struct.unpack(">I", self.read_exact(4))[0]
        if discriminant == _SCV_I32:
            return self._read_int32()
        if discriminant in (_SCV_U64, _SCV_TIMEPOINT, _SCV_DURATION):
            return struct.unpack(">Q", self.read_exact(8))[0]
        if discriminant == _SCV_I64:
            return struct.unpack(">q", self.read_exact(8))[0]
        if discriminant == _SCV_U128:
            hi, lo = struct.unpack(">QQ", self.read_exact(16))
            return (hi << 64) | lo
        if discriminant == _SCV_I128:
            hi, lo = struct.unpack(">qQ", self.read_exact(16))
            return (hi << 64) | lo
        if discriminant == _SCV_BYTES:
            return self._read_opaque()
        if discriminant in (_SCV_STRING, _SCV_SYMBOL):
            try:
                return self._read_opaque().decode("utf-8")
            except UnicodeDecodeError as exc:
                raise BinaryDecodeError("Invalid UTF-8 string in binary schema.") from exc
        if discriminant == _SCV_VEC:
            return [self.read_value() for _ in range(self._read_optional_count())]
        if discriminant == _SCV_MAP:
            return self._read_map()
        raise BinaryDecodeError(f"Unsupported ScVal type {discriminant} in binary schema.")

    def _read_map(self) -> dict[str, Any]:
        entries: dict[str, Any] = {}
        for _ in range(self._read_optional_count()):
            key = self.read_value()
            if not isinstance(key, str):
                raise BinaryDecodeError("Binary schema map keys must be symbols.")
            entries[key] = self.read_value()
        return entries

    def _read_optional_count(self) -> int:
        if self._read_int32() == 0:
            return 0
        count = struct.unpack(">I", self.read_exact(4))[0]
        if count > self.remaining:
            raise BinaryDecodeError("Binary schema collection length exceeds payload.")
        return count

    def _read_opaque(self) -> bytes:
        length = struct.unpack(">I", self.read_exact(4))[0]
        data = self.read_exact(length)
        self.read_exact((4 - length % 4) % 4)
        return data

    def _read_int32(self) -> int:
        return struct.unpack(">i", self.read_exact(4))[0]

