"""Field type catalog and verbose/short-code mapping."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Literal

_LOGGER = logging.getLogger(__name__)

UnknownTypePolicy = Literal["warn", "error"]


class UnsupportedFormatError(ValueError):
    """Raised when a type token has no catalog mapping."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Unsupported field type: {token!r}")
        self.token = token


class FieldType(str, Enum):
    """Closed catalog of primitive field types."""

    BOOLEAN = "boolean"
    CHAR = "char"
    STRING = "string"
    SYMBOL = "symbol"
    BYTE = "byte"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    INT128 = "int128"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT = "float"
    DOUBLE = "double"
    DATETIME = "datetime"
    TIMESTAMP = "timestamp"
    ADDRESS = "address"
    AMOUNT = "amount"
    BYTES = "bytes"
    ARRAY = "array"
    MAP = "map"


@dataclass(frozen=True)
class ParameterizedType:
    """Container type with element types, such as ``array<string>`` or ``map<symbol,u32>``.

    ``container`` is one of ``array``, ``option`` or ``map``; ``map`` takes a key and a
    value type, the others a single element type.
    """

    container: str
    arguments: tuple[TypeSpec, ...]

    @property
    def is_option(self) -> bool:
        """Return True for ``option<...>`` types, which also accept null."""
        return self.container == "option"

    def __str__(self) -> str:
        return type_name(self)


TypeSpec = FieldType | ParameterizedType | str

# One row per type; both lookup directions are derived from this table.
_TYPE_CODES: tuple[tuple[FieldType, str], ...] = (
    (FieldType.BOOLEAN, "b"),
    (FieldType.CHAR, "c"),
    (FieldType.STRING, "s"),
    (FieldType.SYMBOL, "sy"),
    (FieldType.BYTE, "by"),
    (FieldType.INT8, "i8"),
    (FieldType.INT16, "i16"),
    (FieldType.INT32, "i32"),
    (FieldType.INT64, "i64"),
    (FieldType.INT128, "i128"),
    (FieldType.UINT8, "u8"),
    (FieldType.UINT16, "u16"),
    (FieldType.UINT32, "u32"),
    (FieldType.UINT64, "u64"),
    (FieldType.FLOAT, "f"),
    (FieldType.DOUBLE, "d"),
    (FieldType.DATETIME, "dt"),
    (FieldType.TIMESTAMP, "ts"),
    (FieldType.ADDRESS, "a"),
    (FieldType.AMOUNT, "am"),
    (FieldType.BYTES, "bs"),
    (FieldType.ARRAY, "ar"),
    (FieldType.MAP, "mp"),
)

_CODE_BY_TYPE = MappingProxyType({field_type: code for field_type, code in _TYPE_CODES})
_TYPE_BY_CODE = MappingProxyType({code: field_type for field_type, code in _TYPE_CODES})

# (container, short code, number of type arguments)
_CONTAINERS: tuple[tuple[str, str, int], ...] = (
    ("array", "ar", 1),
    ("option", "op", 1),
    ("map", "mp", 2),
)
_CONTAINER_ARITY = MappingProxyType({name: arity for name, _, arity in _CONTAINERS})
_CONTAINER_CODES = MappingProxyType({name: code for name, code, _ in _CONTAINERS})
_CONTAINER_BY_CODE = MappingProxyType({code: name for name, code, _ in _CONTAINERS})
_CONTAINER_BY_TOKEN = MappingProxyType(
    {**{name: name for name, _, _ in _CONTAINERS}, **_CONTAINER_BY_CODE}
)

# Tokens used by older attestation schema definitions.
_LEGACY_ALIASES = MappingProxyType(
    {
        "bool": FieldType.BOOLEAN,
        "str": FieldType.STRING,
        "u128": FieldType.INT128,
        "number": FieldType.DOUBLE,
        "integer": FieldType.INT64,
    }
)

SHORT_CODES: frozenset[str] = frozenset(_TYPE_BY_CODE)

# (min, max) inclusive bounds of the integral types.
INTEGER_BOUNDS = MappingProxyType(
    {
        FieldType.BYTE: (0, 2**8 - 1),
        FieldType.INT8: (-(2**7), 2**7 - 1),
        FieldType.INT16: (-(2**15), 2**15 - 1),
        FieldType.INT32: (-(2**31), 2**31 - 1),
        FieldType.INT64: (-(2**63), 2**63 - 1),
        FieldType.INT128: (-(2**127), 2**127 - 1),
        FieldType.UINT8: (0, 2**8 - 1),
        FieldType.UINT16: (0, 2**16 - 1),
        FieldType.UINT32: (0, 2**32 - 1),
        FieldType.UINT64: (0, 2**64 - 1),
    }
)

_FORMAT_TAGS = MappingProxyType(
    {
        FieldType.ADDRESS: "stellar-address",
        FieldType.AMOUNT: "stellar-amount",
        FieldType.TIMESTAMP: "stellar-timestamp",
        FieldType.INT128: "stellar-i128",
        FieldType.DATETIME: "date-time",
    }
)


def encode_type(field_type: FieldType) -> str:
    """Return the short code of a field type."""
    return _CODE_BY_TYPE[FieldType(field_type)]


def decode_type(code: str) -> FieldType:
    """Return the field type for a short code."""
    try:
        return _TYPE_BY_CODE[code]
    except KeyError as exc:
        raise UnsupportedFormatError(code) from exc


def type_code(value: TypeSpec) -> str:
    """Return the compact code of any type; unknown tokens are returned unchanged."""
    if isinstance(value, FieldType):
        return _CODE_BY_TYPE[value]
    if isinstance(value, ParameterizedType):
        arguments = ",".join(type_code(argument) for argument in value.arguments)
        return f"{_CONTAINER_CODES[value.container]}<{arguments}>"
    return value


def decode_type_code(code: str) -> TypeSpec:
    """Resolve a short code such as ``u32`` or ``ar<s>``; unknown codes are returned unchanged."""
    resolved = _resolve_expression(code.strip(), _TYPE_BY_CODE.get, _CONTAINER_BY_CODE)
    return code if resolved is None else resolved


def lookup_type_token(token: str) -> FieldType | ParameterizedType | None:
    """Resolve a verbose name, short code, legacy alias or container expression, or None."""
    return _resolve_expression(token.strip(), _lookup_leaf, _CONTAINER_BY_TOKEN)


def resolve_type_token(token: str, *, policy: UnknownTypePolicy = "warn") -> TypeSpec:
    """Resolve a verbose name, short code or legacy alias to a field type.

    Container expressions (``array<string>``, ``option<u32>``, ``map<symbol,i128>``)
    resolve to :class:`ParameterizedType`. Unknown tokens are returned unchanged under the
    ``warn`` policy so that newer type names survive a round trip through older tooling.
    """
    resolved = lookup_type_token(token)
    if resolved is not None:
        return resolved
    if policy == "error":
        raise UnsupportedFormatError(token)
    _LOGGER.warning("Unknown field type %r kept as-is", token)
    return token


def is_known_type(value: TypeSpec) -> bool:
    """Return True when the value is part of the catalog."""
    return isinstance(value, FieldType | ParameterizedType)


def type_name(value: TypeSpec) -> str:
    """Return the verbose name used in serialized forms."""
    if isinstance(value, FieldType):
        return value.value
    if isinstance(value, ParameterizedType):
        return f"{value.container}<{','.join(type_name(item) for item in value.arguments)}>"
    return value


def json_type_for(value: TypeSpec) -> str:
    """Return the nearest native JSON type."""
    if isinstance(value, ParameterizedType):
        if value.container == "array":
            return "array"
        if value.container == "map":
            return "object"
        return json_type_for(value.arguments[0])
    if value is FieldType.BOOLEAN:
        return "boolean"
    if value in INTEGER_BOUNDS or value is FieldType.TIMESTAMP:
        return "integer"
    if value in (FieldType.FLOAT, FieldType.DOUBLE, FieldType.AMOUNT):
        return "number"
    if value is FieldType.ARRAY:
        return "array"
    if value is FieldType.MAP:
        return "object"
    return "string"


def format_tag_for(value: TypeSpec) -> str | None:
    """Return the JSON Schema ``format`` tag attached to a type, if any."""
    if isinstance(value, ParameterizedType):
        return format_tag_for(value.arguments[0]) if value.is_option else None
    if not isinstance(value, FieldType):
        return None
    return _FORMAT_TAGS.get(value)


def type_for_format_tag(tag: str) -> FieldType | None:
    """Reverse of :func:`format_tag_for`."""
    for field_type, candidate in _FORMAT_TAGS.items():
        if candidate == tag:
            return field_type
    return None


def _lookup_leaf(token: str) -> FieldType | None:
    try:
        return FieldType(token)
    except ValueError:
        return _TYPE_BY_CODE.get(token) or _LEGACY_ALIASES.get(token)


def _resolve_expression(
    token: str,
    leaf: Callable[[str], FieldType | None],
    containers: Mapping[str, str],
) -> FieldType | ParameterizedType | None:
    if not token:
        return None
    resolved = leaf(token)
    if resolved is not None:
        return resolved

    head, bracket, rest = token.partition("<")
    container = containers.get(head.strip())
    if not bracket or container is None or not rest.endswith(">"):
        return None
    parts = _split_arguments(rest[:-1])
    if parts is None or len(parts) != _CONTAINER_ARITY[container]:
        return None
    arguments: list[TypeSpec] = []
    for part in parts:
        argument = _resolve_expression(part.strip(), leaf, containers)
        if argument is None:
            return None
        arguments.append(argument)
    return ParameterizedType(container, tuple(arguments))


def _split_arguments(text: str) -> list[str] | None:
    parts: list[str] = []
    depth = 0
    start = 0
    for index, char in enumerate(text):
        if char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
            if depth < 0:
                return None
        elif char == "," and depth == 0:
            parts.append(text[start:index])
            start = index + 1
    if depth:
        return None
    parts.append(text[start:])
    return parts
