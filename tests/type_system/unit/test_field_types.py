"""Field type catalog tests."""

from __future__ import annotations

import logging

import pytest
from attest_schema.type_system import (
    SHORT_CODES,
    FieldType,
    ParameterizedType,
    UnsupportedFormatError,
    decode_type,
    decode_type_code,
    encode_type,
    format_tag_for,
    is_known_type,
    json_type_for,
    lookup_type_token,
    resolve_type_token,
    type_code,
    type_for_format_tag,
    type_name,
)


def test_every_field_type_round_trips_through_its_short_code() -> None:
    for field_type in FieldType:
        assert decode_type(encode_type(field_type)) is field_type


def test_short_codes_are_unique_and_cover_the_catalog() -> None:
    codes = [encode_type(field_type) for field_type in FieldType]

    assert len(codes) == len(set(codes))
    assert set(codes) == SHORT_CODES


def test_known_short_codes() -> None:
    assert encode_type(FieldType.BOOLEAN) == "b"
    assert encode_type(FieldType.UINT32) == "u32"
    assert encode_type(FieldType.DATETIME) == "dt"
    assert encode_type(FieldType.TIMESTAMP) == "ts"
    assert decode_type("by") is FieldType.BYTE


def test_decode_type_rejects_unknown_code() -> None:
    with pytest.raises(UnsupportedFormatError) as exc_info:
        decode_type("zz")

    assert exc_info.value.token == "zz"
    assert isinstance(exc_info.value, ValueError)


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("uint32", FieldType.UINT32),
        ("u32", FieldType.UINT32),
        ("  address ", FieldType.ADDRESS),
        ("bool", FieldType.BOOLEAN),
        ("u128", FieldType.INT128),
        ("number", FieldType.DOUBLE),
    ],
)
def test_resolve_type_token_accepts_names_codes_and_aliases(
    token: str, expected: FieldType
) -> None:
    assert resolve_type_token(token) is expected


def test_unknown_token_passes_through_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        resolved = resolve_type_token("vector")

    assert resolved == "vector"
    assert not is_known_type(resolved)
    assert "vector" in caplog.text


def test_unknown_token_raises_under_error_policy() -> None:
    with pytest.raises(UnsupportedFormatError):
        resolve_type_token("vector", policy="error")


def test_type_name_prefers_verbose_names() -> None:
    assert type_name(FieldType.INT64) == "int64"
    assert type_name("vector") == "vector"


def test_json_types_and_format_tags() -> None:
    assert json_type_for(FieldType.BOOLEAN) == "boolean"
    assert json_type_for(FieldType.UINT8) == "integer"
    assert json_type_for(FieldType.TIMESTAMP) == "integer"
    assert json_type_for(FieldType.AMOUNT) == "number"
    assert json_type_for(FieldType.ADDRESS) == "string"
    assert json_type_for("vector") == "string"
    assert format_tag_for(FieldType.ADDRESS) == "stellar-address"
    assert format_tag_for(FieldType.STRING) is None
    assert format_tag_for("vector") is None
    assert type_for_format_tag("stellar-timestamp") is FieldType.TIMESTAMP
    assert type_for_format_tag("email") is None


def test_container_expressions_resolve_to_parameterized_types() -> None:
    assert lookup_type_token("array<string>") == ParameterizedType("array", (FieldType.STRING,))
    assert lookup_type_token("option< u32 >") == ParameterizedType("option", (FieldType.UINT32,))
    assert lookup_type_token("map<symbol, array<i128>>") == ParameterizedType(
        "map",
        (FieldType.SYMBOL, ParameterizedType("array", (FieldType.INT128,))),
    )
    assert lookup_type_token("array") is FieldType.ARRAY
    assert lookup_type_token("mp") is FieldType.MAP


@pytest.mark.parametrize(
    "token", ["array<string,u32>", "map<symbol>", "option<vector>", "array<string", "set<u32>"]
)
def test_malformed_container_expressions_are_unknown(token: str) -> None:
    assert lookup_type_token(token) is None
    assert resolve_type_token(token) == token


def test_container_names_and_codes() -> None:
    nested = ParameterizedType(
        "map", (FieldType.SYMBOL, ParameterizedType("option", (FieldType.AMOUNT,)))
    )

    assert type_name(nested) == "map<symbol,option<amount>>"
    assert str(nested) == "map<symbol,option<amount>>"
    assert type_code(nested) == "mp<sy,op<am>>"
    assert decode_type_code("mp<sy,op<am>>") == nested
    assert is_known_type(nested)
    assert lookup_type_token(type_name(nested)) == nested


def test_decode_type_code_only_resolves_short_codes() -> None:
    assert decode_type_code("b") is FieldType.BOOLEAN
    assert decode_type_code("bool") == "bool"
    assert decode_type_code("uint32") == "uint32"
    assert decode_type_code("array<s>") == "array<s>"
    assert type_code("vector") == "vector"


def test_container_json_types_and_formats() -> None:
    assert json_type_for(ParameterizedType("array", (FieldType.STRING,))) == "array"
    assert json_type_for(ParameterizedType("map", (FieldType.SYMBOL, FieldType.UINT32))) == "object"
    assert json_type_for(ParameterizedType("option", (FieldType.UINT32,))) == "integer"
    assert json_type_for(FieldType.ARRAY) == "array"
    assert json_type_for(FieldType.MAP) == "object"
    assert format_tag_for(ParameterizedType("option", (FieldType.ADDRESS,))) == "stellar-address"
    assert format_tag_for(ParameterizedType("array", (FieldType.ADDRESS,))) is None
