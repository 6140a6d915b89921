"""
Command metadata for the Star Empires order language.

Holds the types describing a command (name, syntax, parameters, examples,
category) and the built-in command table the registry starts from.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class CommandCategory(str, Enum):
    COMBAT = "combat"
    MOVEMENT = "movement"
    CONSTRUCTION = "construction"
    DESIGN = "design"
    RESOURCE = "resource"
    ADMINISTRATION = "administration"


# Display priority: most used during a turn first, not alphabetical
CATEGORY_ORDER: Tuple[CommandCategory, ...] = (
    CommandCategory.COMBAT,
    CommandCategory.MOVEMENT,
    CommandCategory.CONSTRUCTION,
    CommandCategory.DESIGN,
    CommandCategory.RESOURCE,
    CommandCategory.ADMINISTRATION,
)


class ParameterType(str, Enum):
    SHIP = "ship"
    WORLD = "world"
    COORDINATE = "coordinate"
    EMPIRE = "empire"
    SHIPCLASS = "shipclass"
    NUMBER = "number"
    IDENTIFIER = "identifier"
    STORM = "storm"
    PORTAL = "portal"
    COUNT = "count"
    LIST = "list"


@dataclass(frozen=True)
class ParameterDefinition:
    """One parameter slot in a command's syntax."""
    name: str
    type: ParameterType
    required: bool
    description: str
    valid_values: Optional[Tuple[str, ...]] = None
    format: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "type": self.type.value,
            "required": self.required,
            "description": self.description,
        }
        if self.valid_values:
            data["valid_values"] = list(self.valid_values)
        if self.format:
            data["format"] = self.format
        return data


@dataclass(frozen=True)
class CommandDefinition:
    """
    Everything the overlay knows about one command.

    Attributes:
        name: Canonical upper-case keyword (registry key)
        description: One-line summary
        syntax: Human-readable grammar line, e.g. "MOVE <source> TO <destination>"
        parameters: Parameter slots in syntax order
        examples: Complete example order lines
        category: Thematic grouping used for display order
    """
    name: str
    description: str
    syntax: str
    category: CommandCategory
    parameters: Tuple[ParameterDefinition, ...] = field(default_factory=tuple)
    examples: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "syntax": self.syntax,
            "category": self.category.value,
            "parameters": [p.to_dict() for p in self.parameters],
            "examples": list(self.examples),
        }


def _param(name: str, type_: ParameterType, required: bool, description: str, **extra) -> ParameterDefinition:
    return ParameterDefinition(name=name, type=type_, required=required, description=description, **extra)


# ============================================================================
# BUILT-IN COMMAND TABLE
# ============================================================================

BUILTIN_COMMANDS: Tuple[CommandDefinition, ...] = (
    CommandDefinition(
        name="AUTHORIZE",
        description="Grant access permissions to other empires",
        syntax="AUTHORIZE <targets> TO <empires>",
        category=CommandCategory.ADMINISTRATION,
        parameters=(
            _param("targets", ParameterType.LIST, True,
                   "Targets to authorize (ALL, coordinates, locations, or ships)"),
            _param("empires", ParameterType.LIST, True, "Empire names to grant access to"),
        ),
        examples=(
            "AUTHORIZE ALL TO Empire1",
            "AUTHORIZE (1,2) (3,4) TO Empire1 Empire2",
            "AUTHORIZE Ship1 Ship2 TO Empire1",
        ),
    ),
    CommandDefinition(
        name="DENY",
        description="Revoke access permissions from other empires",
        syntax="DENY <targets> TO <empires>",
        category=CommandCategory.ADMINISTRATION,
        parameters=(
            _param("targets", ParameterType.LIST, True,
                   "Targets to deny access to (ALL, coordinates, locations, or ships)"),
            _param("empires", ParameterType.LIST, True, "Empire names to revoke access from"),
        ),
        examples=(
            "DENY ALL TO Empire1",
            "DENY (1,2) TO Empire1 Empire2",
        ),
    ),
    CommandDefinition(
        name="BUILD",
        description="Construct new ships at a world",
        syntax="BUILD <world> <count> <shipclass> [<names>]",
        category=CommandCategory.CONSTRUCTION,
        parameters=(
            _param("world", ParameterType.WORLD, True, "World name where ships will be built"),
            _param("count", ParameterType.COUNT, True, "Number of ships to build or MAX"),
            _param("shipclass", ParameterType.SHIPCLASS, True, "Ship class to build"),
            _param("names", ParameterType.LIST, False,
                   "Optional ship names (auto-generated with * or explicit list)"),
        ),
        examples=(
            "BUILD Homeworld 5 Destroyer",
            "BUILD Homeworld MAX Cruiser Ship*",
            "BUILD Homeworld 3 Fighter Alpha Beta Gamma",
        ),
    ),
    CommandDefinition(
        name="DEPLOY",
        description="Deploy ships from a world to space",
        syntax="DEPLOY <ships>",
        category=CommandCategory.MOVEMENT,
        parameters=(
            _param("ships", ParameterType.LIST, True, "List of ship names to deploy"),
        ),
        examples=("DEPLOY Ship1 Ship2 Ship3",),
    ),
    CommandDefinition(
        name="DESIGN",
        description="Create a new ship class design",
        syntax="DESIGN <world> <shipclass> <hull> <parameters>",
        category=CommandCategory.DESIGN,
        parameters=(
            _param("world", ParameterType.WORLD, True, "World where the design is created"),
            _param("shipclass", ParameterType.SHIPCLASS, True, "Name of the new ship class"),
            _param("hull", ParameterType.IDENTIFIER, True, "Hull type (MISSILE or other hull names)"),
            _param("parameters", ParameterType.LIST, True,
                   "Design parameters (guns, dp, engines, scan, racks for general hulls; "
                   "guns, tonnage for missiles)"),
        ),
        examples=(
            "DESIGN Homeworld Destroyer Scout 2 4 3 2 1",
            "DESIGN Homeworld Missile MISSILE 1 5",
        ),
    ),
    CommandDefinition(
        name="DESTRUCT",
        description="Destroy ships permanently",
        syntax="DESTRUCT <ships>",
        category=CommandCategory.ADMINISTRATION,
        parameters=(
            _param("ships", ParameterType.LIST, True, "List of ship names to destroy"),
        ),
        examples=("DESTRUCT Ship1 Ship2",),
    ),
    CommandDefinition(
        name="FIRE",
        description="Attack targets with ships",
        syntax="FIRE [<sort>] <target> [EXCEPT <ships>] AT <empires>",
        category=CommandCategory.COMBAT,
        parameters=(
            _param("sort", ParameterType.IDENTIFIER, False, "Sort order for firing",
                   valid_values=("ASC", "DESC")),
            _param("target", ParameterType.LIST, True, "Target coordinates, location, or ships"),
            _param("ships", ParameterType.LIST, False, "Ships to exclude from firing (used with EXCEPT)"),
            _param("empires", ParameterType.LIST, True, "Empire names to attack"),
        ),
        examples=(
            "FIRE (1,2) AT Empire1",
            "FIRE ASC Location1 EXCEPT Ship1 AT Empire1 Empire2",
            "FIRE Ship1 Ship2 AT Empire1",
        ),
    ),
    CommandDefinition(
        name="GIVE",
        description="Transfer ship classes to other empires",
        syntax="GIVE <shipclasses> TO <empires>",
        category=CommandCategory.ADMINISTRATION,
        parameters=(
            _param("shipclasses", ParameterType.LIST, True, "Ship class names to transfer"),
            _param("empires", ParameterType.LIST, True, "Empire names to receive the ship classes"),
        ),
        examples=(
            "GIVE Destroyer Cruiser TO Empire1",
            "GIVE Fighter TO Empire1 Empire2",
        ),
    ),
    CommandDefinition(
        name="LOAD",
        description="Load ships onto a carrier",
        syntax="LOAD <ships> ONTO <carrier>",
        category=CommandCategory.MOVEMENT,
        parameters=(
            _param("ships", ParameterType.LIST, True, "Ship names to load"),
            _param("carrier", ParameterType.SHIP, True, "Carrier ship name"),
        ),
        examples=("LOAD Fighter1 Fighter2 ONTO Carrier1",),
    ),
    CommandDefinition(
        name="MOVE",
        description="Move ships to a new location",
        syntax="MOVE <source> [EXCEPT <ships>] TO <destination>",
        category=CommandCategory.MOVEMENT,
        parameters=(
            _param("source", ParameterType.LIST, True, "Source coordinates, location, or ships to move"),
            _param("ships", ParameterType.LIST, False, "Ships to exclude from the move (used with EXCEPT)"),
            _param("destination", ParameterType.COORDINATE, True, "Destination coordinates or location",
                   format="(x,y) or location name"),
        ),
        examples=(
            "MOVE (1,2) TO (3,4)",
            "MOVE Ship1 Ship2 TO Location1",
            "MOVE Location1 EXCEPT Ship1 TO (5,6)",
        ),
    ),
    CommandDefinition(
        name="POOL",
        description="Pool resources from worlds",
        syntax="POOL <world> [EXCEPT <worlds>]",
        category=CommandCategory.RESOURCE,
        parameters=(
            _param("world", ParameterType.WORLD, True, "Primary world for pooling"),
            _param("worlds", ParameterType.LIST, False, "Worlds to exclude from pooling (used with EXCEPT)"),
        ),
        examples=(
            "POOL Homeworld",
            "POOL Homeworld EXCEPT Colony1 Colony2",
        ),
    ),
    CommandDefinition(
        name="REPAIR",
        description="Repair ship damage points",
        syntax="REPAIR <ship> <amount> <worlds>",
        category=CommandCategory.RESOURCE,
        parameters=(
            _param("ship", ParameterType.SHIP, True, "Ship name to repair"),
            _param("amount", ParameterType.IDENTIFIER, True, "Repair amount (DP or MAX)"),
            _param("worlds", ParameterType.LIST, True, "World names to use for repair"),
        ),
        examples=(
            "REPAIR Ship1 DP World1",
            "REPAIR Ship1 MAX World1 World2",
        ),
    ),
    CommandDefinition(
        name="TOGGLE",
        description="Toggle visibility of ships or ship classes",
        syntax="TOGGLE <visibility> <targets>",
        category=CommandCategory.ADMINISTRATION,
        parameters=(
            _param("visibility", ParameterType.IDENTIFIER, True, "Visibility setting",
                   valid_values=("PRIVATE", "PUBLIC")),
            _param("targets", ParameterType.LIST, True, "Ship names or ship class names to toggle"),
        ),
        examples=(
            "TOGGLE PRIVATE Ship1 Ship2",
            "TOGGLE PUBLIC Destroyer Cruiser",
        ),
    ),
    CommandDefinition(
        name="TRANSFER",
        description="Transfer resources between worlds",
        syntax="TRANSFER <fromworld> <amount> <toworld> [<owner>]",
        category=CommandCategory.RESOURCE,
        parameters=(
            _param("fromworld", ParameterType.WORLD, True, "Source world name"),
            _param("amount", ParameterType.COUNT, True, "Amount to transfer or MAX"),
            _param("toworld", ParameterType.WORLD, True, "Destination world name"),
            _param("owner", ParameterType.EMPIRE, False, "Optional empire name for the destination world"),
        ),
        examples=(
            "TRANSFER Homeworld 10 Colony1",
            "TRANSFER Homeworld MAX Colony1 Empire1",
        ),
    ),
)


# ============================================================================
# FALLBACK TABLES
# ============================================================================

# Installed when the configured source fails to load
MINIMAL_FALLBACK_COMMANDS: Tuple[CommandDefinition, ...] = (
    CommandDefinition(
        name="BUILD",
        description="Construct ships (fallback definition)",
        syntax="BUILD <world> <count> <shipclass>",
        category=CommandCategory.CONSTRUCTION,
        examples=("BUILD Homeworld 5 Destroyer",),
    ),
    CommandDefinition(
        name="MOVE",
        description="Move ships (fallback definition)",
        syntax="MOVE <source> TO <destination>",
        category=CommandCategory.MOVEMENT,
        examples=("MOVE Ship1 TO (1,2)",),
    ),
    CommandDefinition(
        name="FIRE",
        description="Attack targets (fallback definition)",
        syntax="FIRE <target> AT <empire>",
        category=CommandCategory.COMBAT,
        examples=("FIRE (1,2) AT Enemy",),
    ),
)


def placeholder_command(name: str, category: CommandCategory) -> CommandDefinition:
    """Generic definition used when no real metadata is available."""
    return CommandDefinition(
        name=name,
        description=f"{name} command (fallback definition - command table unavailable)",
        syntax=f"{name} <parameters>",
        category=category,
        parameters=(
            _param("parameters", ParameterType.IDENTIFIER, False, "Command parameters (see documentation)"),
        ),
        examples=(f"{name} example",),
    )


def emergency_commands() -> List[CommandDefinition]:
    """Served by CommandRegistry.get_all() when it holds nothing at all."""
    return [
        placeholder_command("BUILD", CommandCategory.CONSTRUCTION),
        placeholder_command("MOVE", CommandCategory.MOVEMENT),
        placeholder_command("FIRE", CommandCategory.COMBAT),
        CommandDefinition(
            name="HELP",
            description="The command table is unavailable. Please check the command definitions.",
            syntax="HELP",
            category=CommandCategory.ADMINISTRATION,
        ),
    ]
