"""
Generate a markdown command reference from the registry.

The tables come straight from the loaded CommandDefinitions, so the
reference players read always matches what the overlay shows.

Usage:
    python -m orders_overlay.tools.doc_generator all
    python -m orders_overlay.tools.doc_generator categories
    python -m orders_overlay.tools.doc_generator BUILD
    python -m orders_overlay.tools.doc_generator --check docs/COMMANDS.md

Examples:
    # Regenerate the full reference
    python -m orders_overlay.tools.doc_generator all > docs/COMMANDS.md
"""

import sys
from pathlib import Path
from typing import List, Optional

from orders_overlay.commands.definitions import CommandDefinition
from orders_overlay.commands.registry import CommandRegistry

DEFAULT_DOC_PATH = "docs/COMMANDS.md"


def _escape(text: str) -> str:
    # Pipes would split the markdown cell
    return text.replace("|", "\\|")


def generate_parameter_table(command: CommandDefinition) -> str:
    """Markdown table of one command's parameters."""
    lines = [
        "| Parameter | Type | Required | Description |",
        "|-----------|------|----------|-------------|",
    ]
    for parameter in command.parameters:
        description = parameter.description
        if parameter.valid_values:
            description = f"{description} (one of: {', '.join(parameter.valid_values)})"
        if parameter.format:
            description = f"{description} Format: {parameter.format}"
        lines.append(
            f"| `{parameter.name}` | {parameter.type.value} | "
            f"{'yes' if parameter.required else 'no'} | {_escape(description)} |"
        )
    return "\n".join(lines)


def generate_command_docs(command: CommandDefinition) -> str:
    """Syntax, description, parameters and examples for one command."""
    lines = [
        f"### {command.name}",
        "",
        command.description,
        "",
        "```",
        command.syntax,
        "```",
    ]
    if command.parameters:
        lines.extend(["", generate_parameter_table(command)])
    if command.examples:
        lines.extend(["", "Examples:", ""])
        lines.extend(f"- `{example}`" for example in command.examples)
    return "\n".join(lines)


def generate_category_summary(registry: CommandRegistry) -> str:
    """One table row per command, grouped by category."""
    lines = [
        "| Category | Command | Description |",
        "|----------|---------|-------------|",
    ]
    for category, commands in registry.get_by_category().items():
        for command in commands:
            lines.append(f"| {category.value} | `{command.name}` | {_escape(command.description)} |")
    return "\n".join(lines)


def generate_all_docs(registry: CommandRegistry) -> str:
    """Full reference: summary table, then every command by category."""
    sections: List[str] = [
        "# Star Empires Order Reference",
        "",
        "This document is auto-generated from the command registry.",
        "Run `python -m orders_overlay.tools.doc_generator all` to regenerate.",
        "",
        "## Summary",
        "",
        generate_category_summary(registry),
    ]
    for category, commands in registry.get_by_category().items():
        sections.extend(["", f"## {category.value.title()} Commands"])
        for command in commands:
            sections.extend(["", generate_command_docs(command)])
    return "\n".join(sections) + "\n"


def check_docs_current(registry: CommandRegistry, path: str = DEFAULT_DOC_PATH) -> bool:
    """
    Check if the reference at `path` matches freshly generated output.

    Returns True if docs are current, False if outdated or missing.
    """
    doc_file = Path(path)
    if not doc_file.is_file():
        print(f"Doc check: {path} does not exist")
        return False
    try:
        current = doc_file.read_text(encoding="utf-8")
    except (UnicodeDecodeError, OSError) as e:
        print(f"Doc check: cannot read {path} ({e})")
        return False
    return current == generate_all_docs(registry)


def main(argv: Optional[List[str]] = None, registry: CommandRegistry = None):
    """Command-line interface for doc generator."""
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print("Usage: python -m orders_overlay.tools.doc_generator [all|categories|<COMMAND>|--check [FILE]]")
        print()
        print("Commands:")
        print("  all         Generate the full command reference")
        print("  categories  Generate the per-category summary table")
        print("  <COMMAND>   Generate documentation for one command (e.g. BUILD)")
        print("  --check     Check if documentation is current")
        sys.exit(1)

    registry = registry or CommandRegistry()
    cmd = args[0]

    if cmd == "all":
        print(generate_all_docs(registry), end="")

    elif cmd == "categories":
        print(generate_category_summary(registry))

    elif cmd == "--check":
        path = args[1] if len(args) > 1 else DEFAULT_DOC_PATH
        if check_docs_current(registry, path):
            print("Documentation is current.")
            sys.exit(0)
        else:
            print(f"Documentation is OUTDATED. Regenerate with: python -m orders_overlay.tools.doc_generator all > {path}")
            sys.exit(1)

    else:
        command = registry.get(cmd)
        if command is None:
            print(f"Unknown command: {cmd}")
            suggestions = registry.suggest(cmd)
            if suggestions:
                print(f"Did you mean: {', '.join(suggestions)}?")
            print("Run without arguments for usage help.")
            sys.exit(1)
        print(generate_command_docs(command))


if __name__ == "__main__":
    main()
