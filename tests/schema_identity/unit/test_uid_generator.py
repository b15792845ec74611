"""Schema UID tests."""

from __future__ import annotations

import dataclasses

import pytest
from attest_schema.compact_codec import schema_from_compact
from attest_schema.definition_parsing import encode_binary_schema, parse_definition
from attest_schema.schema_identity import (
    UID_LENGTH,
    SchemaUid,
    UidFormatError,
    canonical_schema_bytes,
    format_uid,
    generate_schema_uid,
    parse_formatted_uid,
)
from attest_schema.schema_management import (
    FieldDefinition,
    FieldValidation,
    SchemaDefinition,
    project_schema,
)
from attest_schema.type_system import FieldType

_COMPACT_DEFINITION = {
    "name": "Credential",
    "description": "Issued credential",
    "fields": [
        {"name": "holder", "type": "address"},
        {"name": "score", "type": "int64", "validation": {"min": 0, "max": 150}},
        {"name": "active", "type": "boolean", "optional": True},
        {"name": "issued_at", "type": "timestamp"},
    ],
}

_PERSON_DEFINITION = {
    "name": "Person",
    "fields": [
        {"name": "name", "type": "string"},
        {"name": "age", "type": "uint32", "validation": {"min": 0, "max": 150}},
        {"name": "address", "type": "address"},
    ],
}


def _schema() -> SchemaDefinition:
    return parse_definition(_COMPACT_DEFINITION).require_schema()


@pytest.mark.parametrize("definition", [_COMPACT_DEFINITION, _PERSON_DEFINITION])
def test_uid_is_deterministic_across_source_formats(definition: dict[str, object]) -> None:
    schema = parse_definition(definition).require_schema()
    from_binary = parse_definition(encode_binary_schema(schema)).require_schema()
    document = project_schema(schema)
    from_schema_document = parse_definition(document).require_schema()
    properties_only = {key: value for key, value in document.items() if key != "$schema"}
    from_properties = parse_definition(properties_only).require_schema()

    expected = generate_schema_uid(schema)

    assert generate_schema_uid(from_binary) == expected
    assert generate_schema_uid(from_schema_document) == expected
    assert generate_schema_uid(from_properties) == expected


def test_uid_ignores_whitespace_and_field_descriptions() -> None:
    schema = _schema()
    spaced = dataclasses.replace(schema, name="  Credential ", description="Issued   credential")
    described = SchemaDefinition(
        name=schema.name,
        description=schema.description,
        fields=tuple(
            dataclasses.replace(definition, description="documented") for definition in schema
        ),
    )

    assert generate_schema_uid(spaced) == generate_schema_uid(schema)
    assert generate_schema_uid(described) == generate_schema_uid(schema)


def test_uid_changes_with_field_type_optionality_and_membership() -> None:
    schema = _schema()
    baseline = generate_schema_uid(schema)
    fields = list(schema.fields)

    retyped = fields.copy()
    retyped[1] = dataclasses.replace(fields[1], field_type=FieldType.INT32)
    toggled = fields.copy()
    toggled[0] = dataclasses.replace(fields[0], optional=True)
    extended = [*fields, FieldDefinition("note", FieldType.STRING)]
    reduced = fields[:-1]
    tightened = fields.copy()
    tightened[1] = dataclasses.replace(fields[1], validation=FieldValidation(minimum=0, maximum=99))

    variants = [retyped, toggled, extended, reduced, tightened]
    uids = {
        generate_schema_uid(SchemaDefinition(schema.name, tuple(variant), schema.description))
        for variant in variants
    }

    assert baseline not in uids
    assert len(uids) == len(variants)


def test_integral_float_bounds_share_the_uid_of_integers() -> None:
    as_int = SchemaDefinition(
        "Score", (FieldDefinition("v", FieldType.DOUBLE, validation=FieldValidation(maximum=5)),)
    )
    as_float = SchemaDefinition(
        "Score", (FieldDefinition("v", FieldType.DOUBLE, validation=FieldValidation(maximum=5.0)),)
    )

    assert canonical_schema_bytes(as_int) == canonical_schema_bytes(as_float)


def test_uid_text_encodings() -> None:
    uid = generate_schema_uid(schema_from_compact("Person", "s name, u32 age"))

    assert len(bytes(uid)) == UID_LENGTH
    assert len(uid.hex()) == 64
    assert str(uid) == uid.hex()
    assert uid.base32() == uid.base32().lower()
    assert "=" not in uid.base32()
    assert SchemaUid.decode(uid.encode("base32"), "base32") == uid
    assert SchemaUid.decode(uid.encode("hex")) == uid


def test_formatted_uid_groups_and_parses_back() -> None:
    uid = generate_schema_uid(_schema())

    formatted = format_uid(uid)
    groups = formatted.split("-")

    assert [len(group) for group in groups] == [8, 8, 8, 8, 32]
    assert parse_formatted_uid(formatted) == uid
    assert format_uid("abc") == "abc"


@pytest.mark.parametrize("text", ["xyz", "abcd", "00" * 31])
def test_invalid_uid_text_is_rejected(text: str) -> None:
    with pytest.raises(UidFormatError):
        parse_formatted_uid(text)


def test_integral_float_enum_members_share_the_uid_of_integers() -> None:
    as_int = SchemaDefinition(
        "Tier",
        (FieldDefinition("v", FieldType.UINT8, validation=FieldValidation(allowed_values=(1, 2))),),
    )
    as_float = SchemaDefinition(
        "Tier",
        (
            FieldDefinition(
                "v", FieldType.UINT8, validation=FieldValidation(allowed_values=(1.0, 2.0))
            ),
        ),
    )

    assert generate_schema_uid(as_int) == generate_schema_uid(as_float)
