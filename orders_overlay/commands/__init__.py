"""
Command metadata for the Star Empires order language.

Usage:
    # Validate a custom command file
    python -m orders_overlay.commands.validator house_rules.json
"""

from .definitions import (
    CATEGORY_ORDER,
    CommandCategory,
    CommandDefinition,
    ParameterDefinition,
    ParameterType,
)
from .registry import CommandRegistry, ServiceStatus
from .validator import (
    CommandFileError,
    ValidationError,
    ValidationResult,
    load_command_file,
    validate_command_file,
)

__all__ = [
    "CATEGORY_ORDER",
    "CommandCategory",
    "CommandDefinition",
    "CommandFileError",
    "CommandRegistry",
    "ParameterDefinition",
    "ParameterType",
    "ServiceStatus",
    "ValidationError",
    "ValidationResult",
    "load_command_file",
    "validate_command_file",
]
