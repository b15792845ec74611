"""JSON Schema projection tests."""

from __future__ import annotations

from attest_schema.schema_management import (
    JSON_SCHEMA_DIALECT,
    TYPE_ANNOTATION,
    FieldDefinition,
    FieldValidation,
    SchemaDefinition,
    project_schema,
)
from attest_schema.type_system import FieldType, ParameterizedType


def test_projects_required_fields_and_domain_formats() -> None:
    schema = SchemaDefinition(
        name="Credential",
        description="Issued credential",
        fields=(
            FieldDefinition("holder", FieldType.ADDRESS, description="Holder account"),
            FieldDefinition("age", FieldType.UINT32, validation=FieldValidation(0, 150)),
            FieldDefinition("balance", FieldType.AMOUNT, optional=True),
            FieldDefinition("issued_at", FieldType.TIMESTAMP),
            FieldDefinition("active", FieldType.BOOLEAN, optional=True),
        ),
    )

    document = project_schema(schema)

    assert document["$schema"] == JSON_SCHEMA_DIALECT
    assert document["type"] == "object"
    assert document["title"] == "Credential"
    assert document["description"] == "Issued credential"
    assert document["required"] == ["holder", "age", "issued_at"]
    assert list(document["properties"]) == ["holder", "age", "balance", "issued_at", "active"]
    assert document["properties"]["holder"] == {
        "type": "string",
        "format": "stellar-address",
        TYPE_ANNOTATION: "address",
        "description": "Holder account",
    }
    assert document["properties"]["age"] == {
        "type": "integer",
        TYPE_ANNOTATION: "uint32",
        "minimum": 0,
        "maximum": 150,
    }
    assert document["properties"]["balance"] == {
        "type": "number",
        "format": "stellar-amount",
        TYPE_ANNOTATION: "amount",
    }
    assert document["properties"]["issued_at"] == {
        "type": "integer",
        "format": "stellar-timestamp",
        TYPE_ANNOTATION: "timestamp",
    }
    assert document["properties"]["active"] == {"type": "boolean", TYPE_ANNOTATION: "boolean"}


def test_projects_pattern_and_enum_constraints() -> None:
    schema = SchemaDefinition(
        name="Badge",
        fields=(
            FieldDefinition(
                "level",
                FieldType.STRING,
                validation=FieldValidation(pattern="^[a-z]+$", allowed_values=("gold", "silver")),
            ),
            FieldDefinition("payload", "vector"),
        ),
    )

    document = project_schema(schema)

    assert "description" not in document
    assert document["properties"]["level"] == {
        "type": "string",
        TYPE_ANNOTATION: "string",
        "pattern": "^[a-z]+$",
        "enum": ["gold", "silver"],
    }
    assert document["properties"]["payload"] == {"type": "string", TYPE_ANNOTATION: "vector"}


def test_projects_container_types() -> None:
    schema = SchemaDefinition(
        name="Roster",
        fields=(
            FieldDefinition("members", ParameterizedType("array", (FieldType.ADDRESS,))),
            FieldDefinition(
                "scores", ParameterizedType("map", (FieldType.SYMBOL, FieldType.UINT32))
            ),
            FieldDefinition("expires", ParameterizedType("option", (FieldType.TIMESTAMP,))),
        ),
    )

    properties = project_schema(schema)["properties"]

    assert properties["members"] == {
        "type": "array",
        "items": {"type": "string", "format": "stellar-address"},
        TYPE_ANNOTATION: "array<address>",
    }
    assert properties["scores"] == {
        "type": "object",
        "additionalProperties": {"type": "integer"},
        TYPE_ANNOTATION: "map<symbol,uint32>",
    }
    assert properties["expires"] == {
        "type": ["integer", "null"],
        "format": "stellar-timestamp",
        TYPE_ANNOTATION: "option<timestamp>",
    }
