"""
Tests for command file validation and loading.

Command files let a game replace the built-in command table; a bad file
must be reported clearly and must never break the overlay.
"""

import json

import pytest

from orders_overlay.commands.definitions import CommandCategory, ParameterType
from orders_overlay.commands.registry import CommandRegistry
from orders_overlay.commands.validator import (
    CommandFileError,
    ValidationResult,
    load_command_file,
    validate_command,
    validate_command_file,
    validate_parameter,
)
from orders_overlay.telemetry import OverlayTelemetry


def _scan_command(**overrides):
    data = {
        "name": "SCAN",
        "description": "Scan a sector for enemy ships",
        "syntax": "SCAN <coordinate> [<range>]",
        "category": "combat",
        "parameters": [
            {"name": "coordinate", "type": "coordinate", "required": True,
             "description": "Sector to scan", "format": "(x,y)"},
            {"name": "range", "type": "number", "required": False,
             "description": "Scan radius", "valid_values": ["1", "2", "3"]},
        ],
        "examples": ["SCAN (3,4)", "SCAN (3,4) 2"],
    }
    data.update(overrides)
    return data


@pytest.fixture
def command_file(tmp_path):
    """A valid command file on disk."""
    path = tmp_path / "house_rules.json"
    path.write_text(json.dumps({"commands": [_scan_command()]}), encoding="utf-8")
    return path


# ============================================================================
# PARAMETER VALIDATION
# ============================================================================

class TestParameterValidation:
    """Tests for validate_parameter."""

    def test_valid_parameter(self):
        result = validate_parameter(
            {"name": "world", "type": "world", "required": True, "description": "Target world"}
        )
        assert result.is_valid
        assert not result.warnings

    def test_missing_required_fields(self):
        result = validate_parameter({"name": "world"})
        assert not result.is_valid
        paths = {e.path for e in result.errors}
        assert {"parameter.type", "parameter.required", "parameter.description"} <= paths

    def test_unknown_type(self):
        result = validate_parameter(
            {"name": "x", "type": "planet", "required": True, "description": "?"}
        )
        assert not result.is_valid
        assert any("type" in e.path for e in result.errors)

    def test_required_must_be_boolean(self):
        result = validate_parameter(
            {"name": "x", "type": "world", "required": "yes", "description": "?"}
        )
        assert not result.is_valid

    def test_unknown_field_is_warning(self):
        result = validate_parameter(
            {"name": "x", "type": "world", "required": True, "description": "?", "colour": "red"}
        )
        assert result.is_valid
        assert any("colour" in w.path for w in result.warnings)

    def test_not_an_object(self):
        assert not validate_parameter("world").is_valid


# ============================================================================
# COMMAND VALIDATION
# ============================================================================

class TestCommandValidation:
    """Tests for validate_command."""

    def test_valid_command(self):
        result = validate_command(_scan_command())
        assert result.is_valid
        assert not result.warnings

    def test_invalid_category(self):
        result = validate_command(_scan_command(category="espionage"))
        assert not result.is_valid
        assert any(e.path == "command.category" for e in result.errors)

    def test_non_alphabetic_name(self):
        result = validate_command(_scan_command(name="SCAN2", syntax="SCAN2 <coordinate>"))
        assert not result.is_valid

    def test_lowercase_name_warns(self):
        result = validate_command(_scan_command(name="scan"))
        assert result.is_valid
        assert any("SCAN" in w.message for w in result.warnings)

    def test_syntax_not_starting_with_keyword_warns(self):
        result = validate_command(_scan_command(syntax="<coordinate> SCAN"))
        assert result.is_valid
        assert any(w.path == "command.syntax" for w in result.warnings)

    def test_nested_parameter_error_has_path(self):
        data = _scan_command()
        data["parameters"][1]["type"] = "bogus"
        result = validate_command(data, "commands[0]")
        assert any(e.path == "commands[0].parameters[1].type" for e in result.errors)

    def test_duplicate_parameter_warns(self):
        data = _scan_command()
        data["parameters"][1]["name"] = "coordinate"
        result = validate_command(data)
        assert any("Duplicate parameter" in w.message for w in result.warnings)

    def test_examples_must_be_strings(self):
        result = validate_command(_scan_command(examples=["SCAN (1,1)", 5]))
        assert not result.is_valid


# ============================================================================
# FILE VALIDATION AND LOADING
# ============================================================================

class TestCommandFile:
    """Tests for validate_command_file and load_command_file."""

    def test_valid_file(self, command_file):
        assert validate_command_file(command_file).is_valid

    def test_accepts_parsed_dict(self):
        assert validate_command_file({"commands": [_scan_command()]}).is_valid

    def test_missing_file(self, tmp_path):
        result = validate_command_file(tmp_path / "missing.json")
        assert not result.is_valid
        assert "not found" in result.errors[0].message

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        result = validate_command_file(str(path))
        assert not result.is_valid
        assert "Invalid JSON" in result.errors[0].message

    def test_non_utf8_file(self, tmp_path):
        path = tmp_path / "latin1.json"
        path.write_bytes(b'{"commands": ["\xff\xfe"]}')
        result = validate_command_file(path)
        assert not result.is_valid
        assert "UTF-8" in result.errors[0].message

    def test_directory_path(self, tmp_path):
        result = validate_command_file(tmp_path)
        assert not result.is_valid
        assert "Not a regular file" in result.errors[0].message

    def test_unreadable_file_raises_command_file_error(self, tmp_path):
        with pytest.raises(CommandFileError):
            load_command_file(tmp_path)

    def test_empty_command_list(self):
        assert not validate_command_file({"commands": []}).is_valid

    def test_duplicate_names_case_insensitive(self):
        result = validate_command_file({"commands": [_scan_command(), _scan_command(name="Scan")]})
        assert not result.is_valid
        assert any("Duplicate command 'SCAN'" in e.message for e in result.errors)

    def test_load_builds_definitions(self, command_file):
        commands = load_command_file(command_file)

        assert len(commands) == 1
        scan = commands[0]
        assert scan.name == "SCAN"
        assert scan.category == CommandCategory.COMBAT
        assert scan.parameters[0].type == ParameterType.COORDINATE
        assert scan.parameters[0].format == "(x,y)"
        assert scan.parameters[1].valid_values == ("1", "2", "3")
        assert scan.examples == ("SCAN (3,4)", "SCAN (3,4) 2")

    def test_load_invalid_raises_with_result(self):
        with pytest.raises(CommandFileError) as exc_info:
            load_command_file({"commands": [_scan_command(category="nope")]})
        assert isinstance(exc_info.value.result, ValidationResult)
        assert not exc_info.value.result.is_valid

    def test_registry_from_file(self, command_file):
        registry = CommandRegistry(source=lambda: load_command_file(command_file))
        assert registry.names() == ["SCAN"]
        assert not registry.get_service_status().has_error

    def test_bad_file_degrades_registry(self, tmp_path):
        """A broken file falls back to the minimal set instead of failing."""
        telemetry = OverlayTelemetry()
        path = tmp_path / "missing.json"
        registry = CommandRegistry(source=lambda: load_command_file(path), telemetry=telemetry)

        assert set(registry.names()) == {"BUILD", "FIRE", "MOVE"}
        assert registry.get_service_status().has_error


class TestValidatorCli:
    """Tests for the command-line entry point."""

    def test_valid_file_exits_zero(self, command_file, monkeypatch, capsys):
        from orders_overlay.commands import validator

        monkeypatch.setattr("sys.argv", ["validator", str(command_file)])
        with pytest.raises(SystemExit) as exc_info:
            validator.main()
        assert exc_info.value.code == 0
        assert "Validation PASSED" in capsys.readouterr().out

    def test_invalid_file_exits_one(self, tmp_path, monkeypatch, capsys):
        from orders_overlay.commands import validator

        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"commands": []}), encoding="utf-8")
        monkeypatch.setattr("sys.argv", ["validator", str(path)])
        with pytest.raises(SystemExit) as exc_info:
            validator.main()
        assert exc_info.value.code == 1
        assert "Validation FAILED" in capsys.readouterr().out

    def test_directory_reports_failure(self, tmp_path, monkeypatch, capsys):
        from orders_overlay.commands import validator

        monkeypatch.setattr("sys.argv", ["validator", str(tmp_path)])
        with pytest.raises(SystemExit) as exc_info:
            validator.main()
        assert exc_info.value.code == 1
        assert "Validation FAILED" in capsys.readouterr().out
