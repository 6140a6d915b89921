"""
Command registry for the orders overlay.

The canonical, queryable table of command metadata. It is built once per
session from a definition source (the built-in table by default), and it is
never left empty: a failing source degrades to a minimal fallback set, and
an empty table serves emergency definitions from get_all().
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from orders_overlay.commands.definitions import (
    BUILTIN_COMMANDS,
    CATEGORY_ORDER,
    MINIMAL_FALLBACK_COMMANDS,
    CommandCategory,
    CommandDefinition,
    emergency_commands,
)
from orders_overlay.telemetry import OverlayTelemetry
from orders_overlay.utils.fuzzy_matcher import FuzzyMatcher

SERVICE = "CommandRegistry"

DefinitionSource = Callable[[], Iterable[CommandDefinition]]


def builtin_source() -> Iterable[CommandDefinition]:
    return BUILTIN_COMMANDS


@dataclass
class ServiceStatus:
    """Snapshot of registry health for debugging and the /status route."""
    initialized: bool
    has_error: bool
    error_message: Optional[str]
    command_count: int
    version: int

    def to_dict(self) -> Dict:
        return {
            "initialized": self.initialized,
            "has_error": self.has_error,
            "error_message": self.error_message,
            "command_count": self.command_count,
            "version": self.version,
        }


class CommandRegistry:
    """
    Case-insensitive table of CommandDefinition keyed by upper-case name.

    Args:
        source: Callable returning the definitions to load (default: built-in table)
        telemetry: Logging port (default: a fresh OverlayTelemetry)
    """

    def __init__(self, source: DefinitionSource = None, telemetry: OverlayTelemetry = None):
        self._source = source or builtin_source
        self.telemetry = telemetry or OverlayTelemetry()
        self.fuzzy_matcher = FuzzyMatcher()

        self._definitions: Optional[Dict[str, CommandDefinition]] = None
        self._initialization_error: Optional[BaseException] = None
        self._initialized = False
        # Bumped on every (re)initialization so dependants can drop caches
        self._version = 0

        self._initialize()

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def _initialize(self) -> None:
        self._version += 1
        try:
            definitions = self._index(self._source())
            if not definitions:
                raise ValueError("Definition source produced no usable commands")
            self._definitions = definitions
            self._initialized = True
            self.telemetry.log_info(SERVICE, f"Initialized with {len(definitions)} commands")
        except Exception as e:
            self._initialization_error = e
            self._initialized = False
            self.telemetry.log_error(SERVICE, "Failed to load command definitions", e)
            self._install_minimal_fallback()

    def _install_minimal_fallback(self) -> None:
        try:
            self._definitions = self._index(MINIMAL_FALLBACK_COMMANDS)
            self._initialized = True
            self.telemetry.log_info(SERVICE, "Installed minimal fallback definitions")
        except Exception as e:
            # get_all() still serves the emergency set from here
            self.telemetry.log_error(SERVICE, "Failed to install minimal fallback", e)
            self._definitions = {}

    def _index(self, definitions: Iterable[CommandDefinition]) -> Dict[str, CommandDefinition]:
        """Key definitions by upper-case name, skipping blanks and duplicates."""
        indexed: Dict[str, CommandDefinition] = {}
        for definition in definitions:
            name = definition.name.strip().upper() if isinstance(definition.name, str) else ""
            if not name:
                self.telemetry.log_warning(SERVICE, f"Skipping definition without a name: {definition!r}")
                continue
            if name in indexed:
                self.telemetry.log_warning(SERVICE, f"Skipping duplicate definition for {name}")
                continue
            if name != definition.name:
                definition = CommandDefinition(
                    name=name,
                    description=definition.description,
                    syntax=definition.syntax,
                    category=definition.category,
                    parameters=definition.parameters,
                    examples=definition.examples,
                )
            indexed[name] = definition
        return indexed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def version(self) -> int:
        return self._version

    def get_all(self) -> Dict[str, CommandDefinition]:
        """
        Copy of the full name -> definition mapping.

        Mutating the returned dict never affects the registry. Never empty.
        """
        if not self._initialized:
            self.telemetry.log_warning(SERVICE, "Registry not initialized, attempting recovery")
            self._initialize()

        if self._definitions:
            return dict(self._definitions)

        self.telemetry.log_error(SERVICE, "No command definitions available, serving emergency fallback")
        return {definition.name: definition for definition in emergency_commands()}

    def _table(self) -> Dict[str, CommandDefinition]:
        """Live mapping for read-only lookups; no copy once initialized."""
        if self._initialized and self._definitions:
            return self._definitions
        return self.get_all()

    def get(self, name) -> Optional[CommandDefinition]:
        """Case-insensitive lookup; None for empty, non-string or unknown names."""
        if not name or not isinstance(name, str):
            return None
        return self._table().get(name.upper())

    def names(self) -> List[str]:
        return sorted(self._table())

    def match_prefix(self, prefix) -> List[str]:
        """Ascending-sorted names starting with prefix (case-insensitive)."""
        if not prefix or not isinstance(prefix, str):
            return []
        prefix_upper = prefix.upper()
        return sorted(name for name in self._table() if name.startswith(prefix_upper))

    def get_by_category(self) -> Dict[CommandCategory, List[CommandDefinition]]:
        """
        Definitions grouped by category.

        Categories follow CATEGORY_ORDER (empty ones omitted); members are
        sorted by name.
        """
        grouped: Dict[CommandCategory, List[CommandDefinition]] = {}
        definitions = self.get_all().values()
        for category in CATEGORY_ORDER:
            members = sorted(
                (d for d in definitions if d.category == category),
                key=lambda d: d.name,
            )
            if members:
                grouped[category] = members
        return grouped

    def suggest(self, query, limit: int = 3) -> List[str]:
        """
        "Did you mean" names for a word that is not a command.

        A confident or medium fuzzy match comes first, followed by the
        closest remaining names up to `limit`.
        """
        if not query or not isinstance(query, str) or limit < 1:
            return []
        try:
            names = self.names()
            verdict = self.fuzzy_matcher.match_with_context(query, names)
            suggestions = [verdict["match"]] if verdict["match"] else []
            for name in self.fuzzy_matcher.closest(query, names, limit=limit):
                if name not in suggestions:
                    suggestions.append(name)
            return suggestions[:limit]
        except Exception as e:
            self.telemetry.log_warning(SERVICE, f"Suggestion lookup failed for '{query}'", e)
            return []

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    def is_healthy(self) -> bool:
        return self._initialized and bool(self._definitions)

    def get_service_status(self) -> ServiceStatus:
        return ServiceStatus(
            initialized=self._initialized,
            has_error=self._initialization_error is not None,
            error_message=str(self._initialization_error) if self._initialization_error else None,
            command_count=len(self._definitions) if self._definitions else 0,
            version=self._version,
        )

    def attempt_recovery(self) -> bool:
        """Clear all state and reload from the source. Returns resulting health."""
        self.telemetry.log_info(SERVICE, "Attempting recovery")
        self._initialization_error = None
        self._initialized = False
        self._definitions = None

        self._initialize()

        recovered = self.is_healthy()
        if recovered and self._initialization_error is None:
            self.telemetry.log_info(SERVICE, "Recovery successful")
        else:
            self.telemetry.log_warning(SERVICE, "Recovery only partially successful")
        return recovered
