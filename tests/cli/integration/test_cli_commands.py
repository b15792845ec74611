"""End-to-end CLI command tests."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner
from attest_schema.cli import cli, main
from attest_schema.definition_parsing import parse_definition
from attest_schema.schema_identity import generate_schema_uid

VALID_ADDRESS = "GAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAWHF"
PERSON_DEFINITION = {
    "name": "Person",
    "fields": [
        {"name": "name", "type": "string"},
        {"name": "age", "type": "uint32", "validation": {"min": 0, "max": 150}},
        {"name": "address", "type": "address"},
    ],
}


def _write_json(path: Path, value: object) -> Path:
    path.write_text(json.dumps(value), encoding="utf-8")
    return path


def test_inspect_reports_source_format(tmp_path: Path) -> None:
    definition = _write_json(tmp_path / "person.json", PERSON_DEFINITION)

    result = CliRunner().invoke(cli, ["inspect", str(definition)])

    assert result.exit_code == 0
    summary = json.loads(result.output)
    assert summary["source_format"] == "compact_definition"
    assert summary["canonical"] is True
    assert [field["name"] for field in summary["schema"]["fields"]] == ["name", "age", "address"]


def test_project_reads_definition_from_stdin() -> None:
    result = CliRunner().invoke(cli, ["project", "-"], input=json.dumps(PERSON_DEFINITION))

    assert result.exit_code == 0
    document = json.loads(result.output)
    assert document["title"] == "Person"
    assert document["required"] == ["name", "age", "address"]
    assert document["properties"]["address"]["format"] == "stellar-address"


def test_uid_matches_library_and_binary_form(tmp_path: Path) -> None:
    definition = _write_json(tmp_path / "person.json", PERSON_DEFINITION)
    expected = generate_schema_uid(parse_definition(PERSON_DEFINITION).require_schema())
    runner = CliRunner()

    hex_result = runner.invoke(cli, ["uid", str(definition)])
    base32_result = runner.invoke(cli, ["uid", str(definition), "--encoding", "base32"])
    dashed_result = runner.invoke(cli, ["uid", str(definition), "--dashed"])
    binary_result = runner.invoke(cli, ["encode-binary", str(definition)])
    binary_path = tmp_path / "person.xdr"
    binary_path.write_text(binary_result.output, encoding="utf-8")
    from_binary = runner.invoke(cli, ["uid", str(binary_path)])

    assert hex_result.output.strip() == expected.hex()
    assert base32_result.output.strip() == expected.base32()
    assert dashed_result.output.strip().replace("-", "") == expected.hex()
    assert binary_result.output.startswith("XDR:")
    assert from_binary.output.strip() == expected.hex()


def test_uid_encoding_defaults_to_settings(tmp_path: Path) -> None:
    definition = _write_json(tmp_path / "person.json", PERSON_DEFINITION)
    config_path = tmp_path / "settings.yaml"
    config_path.write_text("identity:\n  uid_encoding: base32\n", encoding="utf-8")
    expected = generate_schema_uid(parse_definition(PERSON_DEFINITION).require_schema())

    result = CliRunner().invoke(cli, ["--config", str(config_path), "uid", str(definition)])

    assert result.exit_code == 0
    assert result.output.strip() == expected.base32()


def test_validate_accepts_conforming_record(tmp_path: Path, capsys) -> None:
    definition = _write_json(tmp_path / "person.json", PERSON_DEFINITION)
    record = _write_json(
        tmp_path / "record.json", {"name": "John Doe", "age": 30, "address": VALID_ADDRESS}
    )

    exit_code = main(["validate", "--definition", str(definition), "--record", str(record)])
    captured = capsys.readouterr()

    assert exit_code == 0
    assert captured.out.strip() == "accepted"


def test_validate_rejects_and_lists_errors(tmp_path: Path, capsys) -> None:
    definition = _write_json(tmp_path / "person.json", PERSON_DEFINITION)
    record = _write_json(tmp_path / "record.json", {"name": "John Doe", "age": 200})

    exit_code = main(["validate", "--definition", str(definition), "--record", str(record)])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert captured.out.splitlines() == [
        "range\tage\tField 'age' exceeds maximum value 150",
        "missing\taddress\tRequired field 'address' is missing",
    ]
    assert "Record rejected with 2 error(s)." in captured.err


def test_validate_requires_json_object_record(tmp_path: Path, capsys) -> None:
    definition = _write_json(tmp_path / "person.json", PERSON_DEFINITION)
    record = _write_json(tmp_path / "record.json", [1, 2])

    exit_code = main(["validate", "--definition", str(definition), "--record", str(record)])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "Record must be a JSON object." in captured.err


def test_defaults_prints_placeholder_record(tmp_path: Path) -> None:
    definition = _write_json(tmp_path / "person.json", PERSON_DEFINITION)

    result = CliRunner().invoke(cli, ["defaults", str(definition)])

    assert result.exit_code == 0
    assert json.loads(result.output) == {"name": "", "age": 0, "address": VALID_ADDRESS}


def test_encode_record_tags_payload_with_schema_uid(tmp_path: Path) -> None:
    definition = _write_json(tmp_path / "person.json", PERSON_DEFINITION)
    record = _write_json(
        tmp_path / "record.json",
        {"name": "John Doe", "age": 30, "address": VALID_ADDRESS, "note": "dropped"},
    )
    expected = generate_schema_uid(parse_definition(PERSON_DEFINITION).require_schema())

    result = CliRunner().invoke(
        cli, ["encode-record", "--definition", str(definition), "--record", str(record)]
    )

    assert result.exit_code == 0
    encoded = json.loads(result.output)
    assert encoded["schema_uid"] == expected.hex()
    assert json.loads(encoded["payload"]) == {
        "name": "John Doe",
        "age": 30,
        "address": VALID_ADDRESS,
    }


def test_encode_record_refuses_invalid_record(tmp_path: Path, capsys) -> None:
    definition = _write_json(tmp_path / "person.json", PERSON_DEFINITION)
    record = _write_json(tmp_path / "record.json", {"name": "John Doe", "age": 30})

    exit_code = main(["encode-record", "--definition", str(definition), "--record", str(record)])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert captured.out.splitlines() == ["missing\taddress\tRequired field 'address' is missing"]
    assert "Record rejected with 1 error(s)." in captured.err


def test_compact_round_trip_through_cli(tmp_path: Path) -> None:
    definition = _write_json(tmp_path / "person.json", PERSON_DEFINITION)
    runner = CliRunner()

    encoded = runner.invoke(cli, ["compact-encode", str(definition)])
    decoded = runner.invoke(cli, ["compact-decode", encoded.output.strip(), "--name", "Person"])

    assert encoded.output.strip() == "s name, u32 age, a address"
    assert decoded.exit_code == 0
    assert [(field["name"], field["type"]) for field in json.loads(decoded.output)["fields"]] == [
        ("name", "string"),
        ("age", "uint32"),
        ("address", "address"),
    ]


def test_compact_decode_reports_malformed_text(capsys) -> None:
    exit_code = main(["compact-decode", "s", "--name", "Broken"])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "Malformed compact entry" in captured.err


def test_generate_config_writes_template_once(tmp_path: Path, capsys) -> None:
    output_path = tmp_path / "attest-schema.yaml"

    first = main(["generate-config", "--output", str(output_path)])
    second = main(["generate-config", "--output", str(output_path)])
    captured = capsys.readouterr()

    assert first == 0
    assert second == 1
    assert output_path.exists()
    assert "already exists" in captured.err
