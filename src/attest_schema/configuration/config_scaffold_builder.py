"""Settings scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "attest-schema.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Settings for attest-schema.
# Every key is optional; the values below are the defaults.

detection:
  # Prefix marking binary (base64 XDR) schema definitions.
  binary_tag: "XDR:"
  # Reject definitions that match no known schema format instead of passing them through.
  strict: false
  # What to do with field type tokens the catalog does not know (warn or error).
  unknown_types: warn

identity:
  # Text encoding used when printing schema UIDs (hex or base32).
  uid_encoding: hex

logging:
  level: WARNING
"""


def build_placeholder_settings() -> str:
    """Build a YAML settings template with the defaults and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_settings(output_path: Path | str) -> Path:
    """Write the settings template to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Settings file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_settings(), encoding="utf-8")
    return destination.resolve()
