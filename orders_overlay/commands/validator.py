"""
Validation and loading for command definition files.

A command file replaces the built-in command table, e.g. when a game
master ships house-rule orders. Problems are reported with a JSON path so
the file can be fixed quickly.

Usage:
    from orders_overlay.commands.validator import validate_command_file

    result = validate_command_file("house_rules.json")
    if result.is_valid:
        print("Command file is valid!")
    else:
        for error in result.errors:
            print(f"ERROR: {error}")

    # Check a file from the shell
    python -m orders_overlay.commands.validator house_rules.json

File format:
    {"commands": [{"name": "BUILD", "description": "...", "syntax": "...",
                   "category": "construction", "parameters": [...],
                   "examples": ["BUILD Homeworld 5 Destroyer"]}]}
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Set, Tuple

from orders_overlay.commands.definitions import (
    CommandCategory,
    CommandDefinition,
    ParameterDefinition,
    ParameterType,
)


@dataclass
class ValidationError:
    """A single validation error."""
    path: str           # JSON path like "commands[2].parameters[0].type"
    message: str        # Human-readable error message
    severity: str = "error"  # "error" or "warning"

    def __str__(self) -> str:
        return f"[{self.severity.upper()}] {self.path}: {self.message}"


@dataclass
class ValidationResult:
    """Result of validating a JSON structure."""
    is_valid: bool = True
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationError] = field(default_factory=list)

    def add_error(self, path: str, message: str) -> None:
        """Add a validation error."""
        self.errors.append(ValidationError(path, message, "error"))
        self.is_valid = False

    def add_warning(self, path: str, message: str) -> None:
        """Add a validation warning (doesn't fail validation)."""
        self.warnings.append(ValidationError(path, message, "warning"))

    def merge(self, other: 'ValidationResult') -> None:
        """Merge another result into this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        if not other.is_valid:
            self.is_valid = False


class CommandFileError(Exception):
    """Raised by load_command_file when a file cannot be used."""

    def __init__(self, message: str, result: ValidationResult = None):
        super().__init__(message)
        self.result = result or ValidationResult()


# ============================================================================
# SCHEMA DEFINITIONS
# ============================================================================

VALID_CATEGORIES = {c.value for c in CommandCategory}
VALID_PARAMETER_TYPES = {t.value for t in ParameterType}

COMMAND_REQUIRED_FIELDS = {"name", "description", "syntax", "category"}
COMMAND_OPTIONAL_FIELDS = {"parameters", "examples"}

PARAMETER_REQUIRED_FIELDS = {"name", "type", "required", "description"}
PARAMETER_OPTIONAL_FIELDS = {"valid_values", "format"}


def _type_name(value: Any) -> str:
    return type(value).__name__


def _check_string(result: ValidationResult, data: Dict[str, Any], key: str, path: str) -> None:
    if key not in data:
        return
    if not isinstance(data[key], str):
        result.add_error(f"{path}.{key}", f"Must be a string, got {_type_name(data[key])}")
    elif not data[key].strip():
        result.add_error(f"{path}.{key}", "Cannot be empty")


def _check_string_list(result: ValidationResult, data: Dict[str, Any], key: str, path: str) -> None:
    if key not in data:
        return
    if not isinstance(data[key], list):
        result.add_error(f"{path}.{key}", f"Must be an array, got {_type_name(data[key])}")
        return
    for i, item in enumerate(data[key]):
        if not isinstance(item, str):
            result.add_error(f"{path}.{key}[{i}]", f"Must be a string, got {_type_name(item)}")


# ============================================================================
# PARAMETER VALIDATION
# ============================================================================

def validate_parameter(data: Dict[str, Any], path: str = "parameter") -> ValidationResult:
    """
    Validate a parameter definition.

    Args:
        data: Parameter data dictionary
        path: JSON path prefix for error messages

    Returns:
        ValidationResult with any errors/warnings
    """
    result = ValidationResult()

    if not isinstance(data, dict):
        result.add_error(path, f"Must be an object, got {_type_name(data)}")
        return result

    for field_name in sorted(PARAMETER_REQUIRED_FIELDS):
        if field_name not in data:
            result.add_error(f"{path}.{field_name}", "Required field is missing")

    for field_name in sorted(set(data) - PARAMETER_REQUIRED_FIELDS - PARAMETER_OPTIONAL_FIELDS):
        result.add_warning(f"{path}.{field_name}", "Unknown field will be ignored")

    _check_string(result, data, "name", path)
    _check_string(result, data, "description", path)

    if "type" in data and data["type"] not in VALID_PARAMETER_TYPES:
        result.add_error(
            f"{path}.type",
            f"Must be one of {sorted(VALID_PARAMETER_TYPES)}, got '{data['type']}'"
        )

    if "required" in data and not isinstance(data["required"], bool):
        result.add_error(f"{path}.required", f"Must be a boolean, got {_type_name(data['required'])}")

    _check_string_list(result, data, "valid_values", path)
    if isinstance(data.get("valid_values"), list) and len(data["valid_values"]) == 0:
        result.add_warning(f"{path}.valid_values", "Empty list - omit the field instead")

    if "format" in data and data["format"] is not None and not isinstance(data["format"], str):
        result.add_error(f"{path}.format", f"Must be a string or null, got {_type_name(data['format'])}")

    return result


# ============================================================================
# COMMAND VALIDATION
# ============================================================================

def validate_command(data: Dict[str, Any], path: str = "command") -> ValidationResult:
    """
    Validate a command definition.

    Args:
        data: Command data dictionary
        path: JSON path prefix for error messages

    Returns:
        ValidationResult with any errors/warnings
    """
    result = ValidationResult()

    if not isinstance(data, dict):
        result.add_error(path, f"Must be an object, got {_type_name(data)}")
        return result

    for field_name in sorted(COMMAND_REQUIRED_FIELDS):
        if field_name not in data:
            result.add_error(f"{path}.{field_name}", "Required field is missing")

    for field_name in sorted(set(data) - COMMAND_REQUIRED_FIELDS - COMMAND_OPTIONAL_FIELDS):
        result.add_warning(f"{path}.{field_name}", "Unknown field will be ignored")

    _check_string(result, data, "name", path)
    _check_string(result, data, "description", path)
    _check_string(result, data, "syntax", path)

    name = data.get("name")
    if isinstance(name, str) and name.strip():
        if not name.strip().isalpha():
            result.add_error(f"{path}.name", f"Command keywords must be alphabetic, got '{name}'")
        elif name != name.upper():
            result.add_warning(f"{path}.name", f"Will be registered as '{name.strip().upper()}'")

        syntax = data.get("syntax")
        if isinstance(syntax, str) and syntax.strip():
            first_word = syntax.split()[0]
            if first_word.upper() != name.strip().upper():
                result.add_warning(f"{path}.syntax", f"Syntax should start with the keyword '{name.upper()}'")

    if "category" in data and data["category"] not in VALID_CATEGORIES:
        result.add_error(
            f"{path}.category",
            f"Must be one of {sorted(VALID_CATEGORIES)}, got '{data['category']}'"
        )

    if "parameters" in data:
        if not isinstance(data["parameters"], list):
            result.add_error(f"{path}.parameters", f"Must be an array, got {_type_name(data['parameters'])}")
        else:
            seen: Set[str] = set()
            for i, param in enumerate(data["parameters"]):
                result.merge(validate_parameter(param, f"{path}.parameters[{i}]"))
                if isinstance(param, dict) and isinstance(param.get("name"), str):
                    if param["name"] in seen:
                        result.add_warning(
                            f"{path}.parameters[{i}].name",
                            f"Duplicate parameter name '{param['name']}'"
                        )
                    seen.add(param["name"])

    _check_string_list(result, data, "examples", path)

    return result


# ============================================================================
# FILE VALIDATION
# ============================================================================

def _read_json(path_or_data: Any, result: ValidationResult) -> Any:
    if not isinstance(path_or_data, (str, Path)):
        return path_or_data

    path = Path(path_or_data)
    if not path.exists():
        result.add_error("file", f"File not found: {path}")
        return None
    if not path.is_file():
        result.add_error("file", f"Not a regular file: {path}")
        return None
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        result.add_error("file", f"Invalid JSON: {e}")
        return None
    except UnicodeDecodeError as e:
        result.add_error("file", f"File is not valid UTF-8: {e}")
        return None
    except OSError as e:
        result.add_error("file", f"Cannot read file: {e}")
        return None


def validate_command_file(path_or_data: Any) -> ValidationResult:
    """
    Validate a complete command file.

    Can accept either a file path or an already-parsed dictionary.

    Args:
        path_or_data: Path to JSON file or dict with a "commands" array

    Returns:
        ValidationResult with any errors/warnings
    """
    result = ValidationResult()
    data = _read_json(path_or_data, result)
    if not result.is_valid:
        return result

    if not isinstance(data, dict):
        result.add_error("root", f"Command file must be a JSON object, got {_type_name(data)}")
        return result

    if "commands" not in data:
        result.add_error("commands", "Required field is missing")
        return result

    commands = data["commands"]
    if not isinstance(commands, list):
        result.add_error("commands", f"Must be an array, got {_type_name(commands)}")
        return result

    if len(commands) == 0:
        result.add_error("commands", "Command file defines no commands")
        return result

    seen: Set[str] = set()
    for i, command in enumerate(commands):
        result.merge(validate_command(command, f"commands[{i}]"))

        # Cross-validation: keywords are case-insensitive, so BUILD and Build collide
        if isinstance(command, dict) and isinstance(command.get("name"), str):
            key = command["name"].strip().upper()
            if key in seen:
                result.add_error(f"commands[{i}].name", f"Duplicate command '{key}'")
            seen.add(key)

    return result


# ============================================================================
# LOADING
# ============================================================================

def _build_parameter(data: Dict[str, Any]) -> ParameterDefinition:
    valid_values = data.get("valid_values")
    return ParameterDefinition(
        name=data["name"],
        type=ParameterType(data["type"]),
        required=data["required"],
        description=data["description"],
        valid_values=tuple(valid_values) if valid_values else None,
        format=data.get("format"),
    )


def _build_command(data: Dict[str, Any]) -> CommandDefinition:
    return CommandDefinition(
        name=data["name"].strip().upper(),
        description=data["description"],
        syntax=data["syntax"],
        category=CommandCategory(data["category"]),
        parameters=tuple(_build_parameter(p) for p in data.get("parameters", [])),
        examples=tuple(data.get("examples", [])),
    )


def load_command_file(path_or_data: Any) -> Tuple[CommandDefinition, ...]:
    """
    Validate and load a command file.

    Raises:
        CommandFileError: if the file is missing, malformed or invalid
    """
    result = ValidationResult()
    data = _read_json(path_or_data, result)
    if not result.is_valid:
        raise CommandFileError(str(result.errors[0]), result)

    result = validate_command_file(data)
    if not result.is_valid:
        raise CommandFileError(
            f"Command file has {len(result.errors)} error(s); first: {result.errors[0]}",
            result,
        )

    return tuple(_build_command(command) for command in data["commands"])


# ============================================================================
# CLI TOOL
# ============================================================================

def main():
    """Command-line validation tool for command files."""
    import sys

    if len(sys.argv) < 2:
        print("Usage: python -m orders_overlay.commands.validator <commands.json>")
        print("\nValidates a command definition file for the orders overlay.")
        sys.exit(1)

    file_path = sys.argv[1]
    print(f"Validating: {file_path}")
    print()

    result = validate_command_file(file_path)

    if result.errors:
        print("ERRORS:")
        for error in result.errors:
            print(f"  {error}")
        print()

    if result.warnings:
        print("WARNINGS:")
        for warning in result.warnings:
            print(f"  {warning}")
        print()

    if result.is_valid:
        print("Validation PASSED")
        if result.warnings:
            print(f"  ({len(result.warnings)} warnings)")
        sys.exit(0)
    else:
        print(f"Validation FAILED ({len(result.errors)} errors)")
        sys.exit(1)


if __name__ == "__main__":
    main()
