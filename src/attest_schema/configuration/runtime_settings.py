"""Configuration domain entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from attest_schema.schema_identity import UidEncoding
from attest_schema.type_system import UnknownTypePolicy


@dataclass(frozen=True)
class DetectionSettings:
    """Source format detection behaviour."""

    binary_tag: str = "XDR:"
    strict: bool = False
    unknown_types: UnknownTypePolicy = "warn"


@dataclass(frozen=True)
class IdentitySettings:
    """Schema UID presentation."""

    uid_encoding: UidEncoding = "hex"


@dataclass(frozen=True)
class LoggingSettings:
    """Diagnostic logging configuration."""

    level: str = "WARNING"


@dataclass(frozen=True)
class Settings:
    """Top-level settings aggregate."""

    path: Path | None = None
    detection: DetectionSettings = field(default_factory=DetectionSettings)
    identity: IdentitySettings = field(default_factory=IdentitySettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
