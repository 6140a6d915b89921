"""
Value types passed between the analyzer, the generator and the renderer.

All types are frozen and use tuples, so content handed to the renderer (or
kept in a cache) cannot be changed behind the generator's back.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple


class ContextType(str, Enum):
    ALL_COMMANDS = "all-commands"
    SPECIFIC_COMMAND = "specific-command"
    PARTIAL_COMMANDS = "partial-commands"
    HIDDEN = "hidden"


class ContentKind(str, Enum):
    ALL_COMMANDS = "all-commands"
    SPECIFIC_COMMAND = "specific-command"
    PARTIAL_COMMANDS = "partial-commands"


class ItemKind(str, Enum):
    COMMAND = "command"
    SYNTAX = "syntax"
    PARAMETER = "parameter"
    EXAMPLE = "example"
    DESCRIPTION = "description"


@dataclass(frozen=True)
class OverlayContext:
    """
    What the overlay should show for the cursor's current line.

    command_name is set only for SPECIFIC_COMMAND; prefix and matches only
    for PARTIAL_COMMANDS. Use the classmethod constructors rather than
    building one by hand.
    """
    type: ContextType
    line_content: str = ""
    cursor_position: int = 0
    line_number: int = 0
    command_name: Optional[str] = None
    prefix: Optional[str] = None
    matches: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def all_commands(cls, line_content: str = "", cursor_position: int = 0, line_number: int = 0) -> "OverlayContext":
        return cls(ContextType.ALL_COMMANDS, line_content, cursor_position, line_number)

    @classmethod
    def specific_command(
        cls, command_name: str, line_content: str, cursor_position: int, line_number: int
    ) -> "OverlayContext":
        return cls(ContextType.SPECIFIC_COMMAND, line_content, cursor_position, line_number,
                   command_name=command_name)

    @classmethod
    def partial_commands(
        cls, prefix: str, matches: Sequence[str], line_content: str, cursor_position: int, line_number: int
    ) -> "OverlayContext":
        return cls(ContextType.PARTIAL_COMMANDS, line_content, cursor_position, line_number,
                   prefix=prefix, matches=tuple(matches))

    @classmethod
    def hidden(cls, line_content: str = "", cursor_position: int = 0, line_number: int = 0) -> "OverlayContext":
        return cls(ContextType.HIDDEN, line_content, cursor_position, line_number)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type.value,
            "line_content": self.line_content,
            "cursor_position": self.cursor_position,
            "line_number": self.line_number,
        }
        if self.type == ContextType.SPECIFIC_COMMAND:
            data["command_name"] = self.command_name
        elif self.type == ContextType.PARTIAL_COMMANDS:
            data["prefix"] = self.prefix
            data["matches"] = list(self.matches)
        return data


@dataclass(frozen=True)
class OverlayItem:
    kind: ItemKind
    text: str
    highlight: bool = False
    indent: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "text": self.text, "highlight": self.highlight, "indent": self.indent}


@dataclass(frozen=True)
class OverlaySection:
    items: Tuple[OverlayItem, ...]
    title: Optional[str] = None
    collapsible: bool = False
    expanded: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "items": [item.to_dict() for item in self.items],
            "collapsible": self.collapsible,
            "expanded": self.expanded,
        }


@dataclass(frozen=True)
class OverlayContent:
    """A complete, renderable help panel."""
    kind: ContentKind
    title: str
    sections: Tuple[OverlaySection, ...]
    scrollable: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "title": self.title,
            "sections": [section.to_dict() for section in self.sections],
            "scrollable": self.scrollable,
        }


# Shorthand constructors used throughout the generator

def item(kind: ItemKind, text: str, highlight: bool = False, indent: int = 0) -> OverlayItem:
    return OverlayItem(kind=kind, text=text, highlight=highlight, indent=indent)


def section(
    title: Optional[str],
    items: Sequence[OverlayItem],
    collapsible: bool = False,
    expanded: bool = True,
) -> OverlaySection:
    return OverlaySection(items=tuple(items), title=title, collapsible=collapsible, expanded=expanded)
