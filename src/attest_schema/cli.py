"""Command line interface entry point."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import click

from attest_schema.compact_codec import (
    CompactCodecError,
    compact_table_for,
    encode_compact,
    schema_from_compact,
)
from attest_schema.configuration import (
    DEFAULT_CONFIG_FILENAME,
    ConfigurationError,
    Settings,
    load_settings,
    write_placeholder_settings,
)
from attest_schema.definition_parsing import (
    ParsedDefinition,
    ParseError,
    compact_definition_for,
    encode_binary_schema,
    parse_definition,
)
from attest_schema.record_validation import (
    RecordRejectedError,
    encode_record,
    generate_defaults,
    validate_record,
)
from attest_schema.schema_identity import format_uid, generate_schema_uid
from attest_schema.schema_management import SchemaDefinition, project_schema
from attest_schema.type_system import UnsupportedFormatError

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


class CliError(Exception):
    """Custom CLI error."""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="attest-schema-tool")
@click.option(
    "--config",
    "config_path",
    required=False,
    type=click.Path(path_type=str),
    help="Path to a YAML settings file",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log detection diagnostics.")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """Normalize, identify and validate attestation schema definitions."""
    try:
        settings = load_settings(config_path)
    except ConfigurationError as exc:
        raise CliError(str(exc)) from exc
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.logging.level, format=_LOG_FORMAT
    )
    ctx.obj = settings


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML settings template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a settings file with the default values and guidance comments."""
    try:
        resolved_output = write_placeholder_settings(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="inspect")
@click.argument("definition_path", type=click.Path(path_type=str))
@click.pass_obj
def inspect_definition(settings: Settings, definition_path: str) -> None:
    """Show the detected source format and the canonical schema."""
    parsed = _parse(settings, definition_path)
    summary: dict[str, Any] = {
        "source_format": parsed.source_format.value,
        "canonical": parsed.is_canonical,
    }
    if parsed.schema is not None:
        summary["schema"] = compact_definition_for(parsed.schema)
    _echo_json(summary)


@cli.command(name="project")
@click.argument("definition_path", type=click.Path(path_type=str))
@click.pass_obj
def project(settings: Settings, definition_path: str) -> None:
    """Print the JSON Schema document for a definition."""
    parsed = _parse(settings, definition_path)
    schema = _require_schema(parsed)
    _echo_json(dict(parsed.document) if parsed.document is not None else project_schema(schema))


@cli.command(name="uid")
@click.argument("definition_path", type=click.Path(path_type=str))
@click.option(
    "--encoding",
    type=click.Choice(["hex", "base32"]),
    default=None,
    help="UID text encoding (defaults to identity.uid_encoding)",
)
@click.option("--dashed", is_flag=True, default=False, help="Group the hex UID with dashes.")
@click.pass_obj
def uid(settings: Settings, definition_path: str, encoding: str | None, dashed: bool) -> None:
    """Print the content-addressed UID of a definition."""
    schema_uid = generate_schema_uid(_require_schema(_parse(settings, definition_path)))
    if dashed:
        click.echo(format_uid(schema_uid))
        return
    selected = encoding or settings.identity.uid_encoding
    click.echo(schema_uid.encode(selected))  # type: ignore[arg-type]


@cli.command(name="validate")
@click.option(
    "--definition",
    "definition_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the schema definition ('-' for stdin)",
)
@click.option(
    "--record",
    "record_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the JSON record to check ('-' for stdin)",
)
@click.pass_obj
def validate(settings: Settings, definition_path: str, record_path: str) -> None:
    """Check a JSON record against a schema definition."""
    schema = _require_schema(_parse(settings, definition_path))
    errors = validate_record(schema, _read_record(record_path))
    if not errors:
        click.echo("accepted")
        return
    for error in errors:
        click.echo(f"{error.kind.value}\t{error.field}\t{error.message}")
    raise CliError(f"Record rejected with {len(errors)} error(s).")


@cli.command(name="defaults")
@click.argument("definition_path", type=click.Path(path_type=str))
@click.pass_obj
def defaults(settings: Settings, definition_path: str) -> None:
    """Print a record with a placeholder value for every required field."""
    _echo_json(generate_defaults(_require_schema(_parse(settings, definition_path))))


@cli.command(name="encode-record")
@click.option(
    "--definition",
    "definition_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the schema definition ('-' for stdin)",
)
@click.option(
    "--record",
    "record_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the JSON record to encode ('-' for stdin)",
)
@click.pass_obj
def encode_record_command(settings: Settings, definition_path: str, record_path: str) -> None:
    """Validate a JSON record and print its payload tagged with the schema UID."""
    schema = _require_schema(_parse(settings, definition_path))
    try:
        encoded = encode_record(schema, _read_record(record_path))
    except RecordRejectedError as exc:
        for error in exc.errors:
            click.echo(f"{error.kind.value}\t{error.field}\t{error.message}")
        raise CliError(f"Record rejected with {len(exc.errors)} error(s).") from exc
    _echo_json({"schema_uid": encoded.schema_uid.hex(), "payload": encoded.payload})


@cli.command(name="encode-binary")
@click.argument("definition_path", type=click.Path(path_type=str))
@click.pass_obj
def encode_binary(settings: Settings, definition_path: str) -> None:
    """Print the binary (tagged XDR) form of a definition."""
    schema = _require_schema(_parse(settings, definition_path))
    click.echo(encode_binary_schema(schema, tag=settings.detection.binary_tag))


@cli.command(name="compact-encode")
@click.argument("definition_path", type=click.Path(path_type=str))
@click.pass_obj
def compact_encode(settings: Settings, definition_path: str) -> None:
    """Print the compact '<code> <name>, ...' form of a definition."""
    schema = _require_schema(_parse(settings, definition_path))
    try:
        click.echo(encode_compact(compact_table_for(schema)))
    except CompactCodecError as exc:
        raise CliError(str(exc)) from exc


@cli.command(name="compact-decode")
@click.argument("compact_text")
@click.option("--name", "schema_name", required=True, help="Name of the resulting schema")
@click.option("--description", default=None, help="Optional schema description")
def compact_decode(compact_text: str, schema_name: str, description: str | None) -> None:
    """Expand a compact string into a compact schema definition."""
    try:
        schema = schema_from_compact(schema_name, compact_text, description=description)
    except CompactCodecError as exc:
        raise CliError(str(exc)) from exc
    _echo_json(compact_definition_for(schema))


def _parse(settings: Settings, definition_path: str) -> ParsedDefinition:
    try:
        return parse_definition(_read_text(definition_path), settings.detection)
    except (ParseError, UnsupportedFormatError) as exc:
        raise CliError(str(exc)) from exc


def _require_schema(parsed: ParsedDefinition) -> SchemaDefinition:
    try:
        return parsed.require_schema()
    except ParseError as exc:
        raise CliError(str(exc)) from exc


def _read_record(path: str) -> dict[str, Any]:
    try:
        record = json.loads(_read_text(path))
    except json.JSONDecodeError as exc:
        raise CliError(f"Record is not valid JSON: {exc}") from exc
    if not isinstance(record, dict):
        raise CliError("Record must be a JSON object.")
    return record


def _read_text(path: str) -> str:
    if path == "-":
        return click.get_text_stream("stdin").read()
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise CliError(f"Cannot read {path}: {exc}") from exc


def _echo_json(value: Any) -> None:
    click.echo(json.dumps(value, indent=2, ensure_ascii=False))


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
