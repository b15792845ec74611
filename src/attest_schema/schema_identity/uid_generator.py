"""Content-addressed schema identifiers."""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
from dataclasses import dataclass
from typing import Any, Literal

from attest_schema.schema_management.schema_models import FieldDefinition, SchemaDefinition
from attest_schema.type_system import type_name

UID_LENGTH = 32
UidEncoding = Literal["hex", "base32"]


class UidFormatError(ValueError):
    """Raised when a textual UID cannot be decoded."""


@dataclass(frozen=True)
class SchemaUid:
    """SHA-256 digest identifying a schema's content."""

    digest: bytes

    def __post_init__(self) -> None:
        if len(self.digest) != UID_LENGTH:
            raise UidFormatError(f"Schema UID must be {UID_LENGTH} bytes, got {len(self.digest)}")

    def __bytes__(self) -> bytes:
        return self.digest

    def __str__(self) -> str:
        return self.hex()

    def hex(self) -> str:
        """Return the lower-case hex form (64 characters)."""
        return self.digest.hex()

    def base32(self) -> str:
        """Return the unpadded lower-case RFC 4648 base32 form."""
        return base64.b32encode(self.digest).decode("ascii").rstrip("=").lower()

    def encode(self, encoding: UidEncoding = "hex") -> str:
        """Return the UID in the requested text encoding."""
        if encoding == "hex":
            return self.hex()
        if encoding == "base32":
            return self.base32()
        raise UidFormatError(f"Unsupported UID encoding: {encoding}")

    @classmethod
    def decode(cls, text: str, encoding: UidEncoding = "hex") -> SchemaUid:
        """Parse a UID from its hex, dashed hex or base32 text form."""
        try:
            if encoding == "hex":
                return cls(bytes.fromhex(text.replace("-", "")))
            if encoding == "base32":
                padded = text.upper() + "=" * (-len(text) % 8)
                return cls(base64.b32decode(padded))
        except (ValueError, binascii.Error) as exc:
            raise UidFormatError(f"Invalid {encoding} schema UID: {text!r}") from exc
        raise UidFormatError(f"Unsupported UID encoding: {encoding}")


def canonical_schema_bytes(schema: SchemaDefinition) -> bytes:
    """Serialize the identity-bearing parts of a schema deterministically.

    Fields keep declaration order; map keys are sorted and whitespace inside the schema
    name and description is collapsed, so the bytes do not depend on the source format.
    """
    payload = {
        "name": _normalize_text(schema.name),
        "description": _normalize_text(schema.description or ""),
        "fields": [_field_payload(definition) for definition in schema.fields],
    }
    return json.dumps(
        payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str
    ).encode("utf-8")


def generate_schema_uid(schema: SchemaDefinition) -> SchemaUid:
    """Return the SHA-256 UID of a schema."""
    return SchemaUid(hashlib.sha256(canonical_schema_bytes(schema)).digest())


def format_uid(uid: SchemaUid | str) -> str:
    """Return a hex UID split into dashed groups for display."""
    hex_text = uid.hex() if isinstance(uid, SchemaUid) else uid
    if len(hex_text) != UID_LENGTH * 2:
        return hex_text
    return "-".join(
        (hex_text[:8], hex_text[8:16], hex_text[16:24], hex_text[24:32], hex_text[32:])
    )


def parse_formatted_uid(text: str) -> SchemaUid:
    """Parse a dashed display UID back into a :class:`SchemaUid`."""
    return SchemaUid.decode(text, "hex")


def _field_payload(definition: FieldDefinition) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "name": definition.name,
        "type": type_name(definition.field_type),
        "optional": definition.optional,
    }
    validation = definition.validation
    if validation is not None:
        rules: dict[str, Any] = {}
        if validation.minimum is not None:
            rules["min"] = _normalize_bound(validation.minimum)
        if validation.maximum is not None:
            rules["max"] = _normalize_bound(validation.maximum)
        if validation.pattern is not None:
            rules["pattern"] = validation.pattern
        if validation.allowed_values is not None:
            rules["enum"] = [_normalize_bound(item) for item in validation.allowed_values]
        payload["validation"] = rules
    return payload


def _normalize_bound(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _normalize_text(value: str) -> str:
    return " ".join(value.split())
