"""Settings loader service."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .runtime_settings import DetectionSettings, IdentitySettings, LoggingSettings, Settings

_UNKNOWN_TYPE_POLICIES = ("warn", "error")
_UID_ENCODINGS = ("hex", "base32")


class ConfigurationError(Exception):
    """Raised when the settings file is invalid."""


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load and validate the settings file; no path yields the defaults."""
    if config_path is None:
        return Settings()

    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Settings file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse settings file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Settings root must be a mapping.")

    return Settings(
        path=path,
        detection=_parse_detection_section(parsed.get("detection")),
        identity=_parse_identity_section(parsed.get("identity")),
        logging=_parse_logging_section(parsed.get("logging")),
    )


def _parse_detection_section(value: Any) -> DetectionSettings:
    section = _optional_mapping(value, "detection")
    defaults = DetectionSettings()
    binary_tag = _require_non_empty_string(
        section.get("binary_tag", defaults.binary_tag), "detection.binary_tag"
    )
    strict = _require_bool(section.get("strict", defaults.strict), "detection.strict")
    unknown_types = _require_choice(
        section.get("unknown_types", defaults.unknown_types),
        "detection.unknown_types",
        _UNKNOWN_TYPE_POLICIES,
    )
    return DetectionSettings(
        binary_tag=binary_tag,
        strict=strict,
        unknown_types=unknown_types,  # type: ignore[arg-type]
    )


def _parse_identity_section(value: Any) -> IdentitySettings:
    section = _optional_mapping(value, "identity")
    uid_encoding = _require_choice(
        section.get("uid_encoding", IdentitySettings().uid_encoding),
        "identity.uid_encoding",
        _UID_ENCODINGS,
    )
    return IdentitySettings(uid_encoding=uid_encoding)  # type: ignore[arg-type]


def _parse_logging_section(value: Any) -> LoggingSettings:
    section = _optional_mapping(value, "logging")
    level = _require_non_empty_string(
        section.get("level", LoggingSettings().level), "logging.level"
    ).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigurationError(f"logging.level '{level}' is not a known log level.")
    return LoggingSettings(level=level)


def _optional_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Settings section '{section_name}' must be a mapping.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be a boolean.")
    return value


def _require_choice(value: Any, field_name: str, choices: tuple[str, ...]) -> str:
    normalized = _require_non_empty_string(value, field_name).lower()
    if normalized not in choices:
        raise ConfigurationError(f"{field_name} must be one of: {', '.join(choices)}.")
    return normalized
