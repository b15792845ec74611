"""Schema management exports."""

from .schema_models import FieldDefinition, FieldValidation, SchemaDefinition, SchemaInvariantError
from .schema_projection import JSON_SCHEMA_DIALECT, TYPE_ANNOTATION, project_schema

__all__ = [
    "FieldDefinition",
    "FieldValidation",
    "JSON_SCHEMA_DIALECT",
    "SchemaDefinition",
    "SchemaInvariantError",
    "TYPE_ANNOTATION",
    "project_schema",
]
