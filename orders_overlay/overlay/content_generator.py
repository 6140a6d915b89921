"""
Content generation for the orders overlay.

Builds the OverlayContent the renderer shows: the full command catalogue,
the syntax card for one command, or the list of commands matching a
half-typed keyword. Output is size-budgeted (commands per category, total
commands, total characters), and when the registry is unhealthy a small
hand-written "(Limited)" panel is returned instead. No public method
raises; the worst case is an error panel.
"""

import time
from collections import defaultdict
from dataclasses import dataclass, replace
from typing import Dict, List, Sequence

from orders_overlay import config
from orders_overlay.commands.definitions import CATEGORY_ORDER, CommandCategory, CommandDefinition
from orders_overlay.commands.registry import CommandRegistry
from orders_overlay.overlay.bounded_cache import BoundedCache
from orders_overlay.overlay.models import (
    ContentKind,
    ContextType,
    ItemKind,
    OverlayContent,
    OverlayContext,
    OverlayItem,
    OverlaySection,
    item,
    section,
)
from orders_overlay.telemetry import OverlayTelemetry

SERVICE = "ContentGenerator"

CATEGORY_TITLES: Dict[CommandCategory, str] = {
    CommandCategory.COMBAT: "Combat Commands",
    CommandCategory.MOVEMENT: "Movement Commands",
    CommandCategory.CONSTRUCTION: "Construction Commands",
    CommandCategory.DESIGN: "Design Commands",
    CommandCategory.RESOURCE: "Resource Commands",
    CommandCategory.ADMINISTRATION: "Administration Commands",
}

SERVICE_NOTICE = "The command table is experiencing issues. Command details may be incomplete."
PARTIAL_TIP = "Continue typing to narrow down the matches, or press Tab to complete."


def _spacer() -> OverlayItem:
    return item(ItemKind.DESCRIPTION, "")


def _notice(text: str, highlight: bool = False) -> OverlayItem:
    return item(ItemKind.DESCRIPTION, text, highlight=highlight)


def _truncate(text: str, limit: int) -> str:
    return text[:limit] + "..." if len(text) > limit else text


@dataclass(frozen=True)
class PerformanceMetrics:
    total_sections: int
    total_items: int
    total_length: int
    estimated_render_time: float

    def to_dict(self) -> Dict:
        return {
            "total_sections": self.total_sections,
            "total_items": self.total_items,
            "total_length": self.total_length,
            "estimated_render_time": self.estimated_render_time,
        }


class ContentGenerator:
    """
    Renders OverlayContent from the command registry.

    Args:
        registry: Command table to render
        telemetry: Logging port (default: the registry's)
        max_commands_per_category: Catalogue entries per category section
        max_total_commands: Catalogue entries overall
        max_content_length: Character budget for one panel
        cache_size: Entries in the command card cache
        use_cache: Set False to rebuild every panel
    """

    # Command card budgets
    MAX_PARAMETERS = 10
    MAX_PARAMETER_DESCRIPTION = 200
    MAX_VALID_VALUES = 5
    MAX_EXAMPLES = 3
    MAX_EXAMPLE_LENGTH = 100
    SCROLL_THRESHOLD = 2000

    # Degraded partial panel shows at most this many matches
    MAX_DEGRADED_MATCHES = 10

    # Post-hoc size checks (optimize_content / is_content_too_large)
    MAX_ITEMS_PER_SECTION = 20
    MAX_RENDER_ITEMS = 200
    MAX_RENDER_TIME_MS = 100

    def __init__(
        self,
        registry: CommandRegistry,
        telemetry: OverlayTelemetry = None,
        max_commands_per_category: int = None,
        max_total_commands: int = None,
        max_content_length: int = None,
        cache_size: int = None,
        use_cache: bool = True,
    ):
        self.registry = registry
        self.telemetry = telemetry or getattr(registry, "telemetry", None) or OverlayTelemetry()
        self.max_commands_per_category = max_commands_per_category or config.MAX_COMMANDS_PER_CATEGORY
        self.max_total_commands = max_total_commands or config.MAX_TOTAL_COMMANDS
        self.max_content_length = max_content_length or config.MAX_CONTENT_LENGTH
        self.use_cache = use_cache

        self._category_title_cache: Dict[CommandCategory, str] = {}
        # canonical command name -> OverlayContent
        self._command_cache = BoundedCache(cache_size or config.CACHE_SIZE)
        self._registry_version = getattr(registry, "version", None)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def generate_content(self, context: OverlayContext) -> OverlayContent:
        """Render whatever the analyzer decided the overlay should show."""
        try:
            if context.type == ContextType.SPECIFIC_COMMAND:
                return self.generate_command_content(context.command_name)
            if context.type == ContextType.PARTIAL_COMMANDS:
                return self.generate_partial_commands_content(context.prefix, list(context.matches))
            if context.type == ContextType.HIDDEN:
                return self.generate_empty_content()
            return self.generate_all_commands_content()
        except Exception as e:
            self.telemetry.log_error(SERVICE, "Error dispatching overlay context", e)
            return self.generate_minimal_content()

    def generate_all_commands_content(self) -> OverlayContent:
        """
        The full catalogue, grouped by category in display order.

        Each category gets a collapsible section with a "NAME - description"
        line and an indented syntax line per command. When the command or
        character budget runs out, the panel says so instead of silently
        dropping commands, and the title reports shown/total.
        """
        start = time.perf_counter()
        try:
            if not self._registry_healthy():
                self.telemetry.log_warning(SERVICE, "Registry is not healthy, generating degraded content")
                return self._degraded_all_commands_content()

            by_category = self.registry.get_by_category()
            total_available = sum(len(commands) for commands in by_category.values())

            sections: List[OverlaySection] = []
            rendered = 0
            content_length = 0
            stopped = False

            for category in CATEGORY_ORDER:
                commands = by_category.get(category)
                if not commands:
                    continue

                shown = commands[:self.max_commands_per_category]
                items: List[OverlayItem] = []

                for index, command in enumerate(shown):
                    command_text = f"{command.name} - {command.description}"
                    syntax_text = command.syntax
                    added = len(command_text) + len(syntax_text)

                    if content_length + added > self.max_content_length:
                        items.append(_notice(
                            f"... and {total_available - rendered} more commands "
                            f"(content truncated for performance)",
                            highlight=True,
                        ))
                        stopped = True
                        break

                    if index > 0:
                        items.append(_spacer())
                    items.append(item(ItemKind.COMMAND, command_text))
                    items.append(item(ItemKind.SYNTAX, syntax_text, indent=1))
                    content_length += added
                    rendered += 1

                    if rendered >= self.max_total_commands:
                        stopped = True
                        break

                if not stopped and len(commands) > len(shown):
                    items.append(_notice(f"... and {len(commands) - len(shown)} more {category.value} commands"))

                if items:
                    sections.append(section(
                        self._category_title(category), items, collapsible=True, expanded=True
                    ))
                if stopped:
                    break

            if rendered >= self.max_total_commands and rendered < total_available:
                sections.append(section("Performance Notice", [_notice(
                    f"Showing {rendered} of {total_available} available commands for optimal performance.",
                    highlight=True,
                )]))

            counts = f"{rendered}/{total_available}" if rendered < total_available else f"{rendered}"
            return OverlayContent(
                kind=ContentKind.ALL_COMMANDS,
                title=f"Available Commands ({counts})",
                sections=tuple(sections),
                scrollable=True,
            )
        except Exception as e:
            self.telemetry.log_error(SERVICE, "Error generating all commands content", e)
            return self.generate_error_content("Failed to load command information")
        finally:
            self._report_duration("generate_all_commands_content", start, config.SLOW_GENERATION_MS)

    def generate_command_content(self, command_name) -> OverlayContent:
        """
        Syntax card for one command.

        Unknown or invalid names fall back to the full catalogue. Sections:
        Syntax, Description, Parameters (if any), Examples (if any and the
        character budget allows).
        """
        start = time.perf_counter()
        try:
            if not command_name or not isinstance(command_name, str):
                self.telemetry.log_debug(SERVICE, f"Invalid command name provided: {command_name!r}")
                return self.generate_all_commands_content()

            if not self._registry_healthy():
                self.telemetry.log_warning(SERVICE, "Registry is not healthy, generating degraded content")
                return self._degraded_command_content(command_name)

            definition = self.registry.get(command_name)
            if definition is None:
                self.telemetry.log_debug(SERVICE, f"No definition for '{command_name}', showing all commands")
                return self.generate_all_commands_content()

            self._sync_with_registry()
            if self.use_cache:
                cached = self._command_cache.get(definition.name)
                if cached is not None:
                    return cached

            content = self._build_command_content(definition)
            if self.use_cache:
                self._command_cache.put(definition.name, content)
            return content
        except Exception as e:
            self.telemetry.log_error(SERVICE, f"Error generating command content for {command_name}", e)
            return self.generate_error_content(f"Failed to load information for command: {command_name}")
        finally:
            self._report_duration("generate_command_content", start, config.SLOW_GENERATION_MS / 2)

    def generate_partial_commands_content(self, partial_command, matching_commands: Sequence[str]) -> OverlayContent:
        """
        Commands matching a half-typed keyword.

        A single match is unambiguous and renders that command's card.
        Otherwise matches are grouped by category with the typed prefix
        upper-cased in each name, followed by a completion tip.
        """
        start = time.perf_counter()
        try:
            if not partial_command or not isinstance(partial_command, str) or not matching_commands:
                self.telemetry.log_debug(SERVICE, "Invalid parameters for partial commands content")
                return self.generate_all_commands_content()

            matches = list(dict.fromkeys(m for m in matching_commands if isinstance(m, str) and m))
            if not matches:
                return self.generate_all_commands_content()

            if not self._registry_healthy():
                self.telemetry.log_warning(SERVICE, "Registry is not healthy, generating degraded content")
                return self._degraded_partial_content(partial_command, matches)

            if len(matches) == 1:
                return self.generate_command_content(matches[0])

            return self._build_partial_content(partial_command, matches)
        except Exception as e:
            self.telemetry.log_error(SERVICE, f"Error generating partial commands content for '{partial_command}'", e)
            return self.generate_error_content(f"Failed to load matching commands for: {partial_command}")
        finally:
            self._report_duration("generate_partial_commands_content", start, config.SLOW_GENERATION_MS / 2)

    def generate_empty_content(self) -> OverlayContent:
        """Content for the hidden overlay state."""
        return OverlayContent(kind=ContentKind.ALL_COMMANDS, title="Syntax Help", sections=(), scrollable=False)

    def generate_error_content(self, message: str) -> OverlayContent:
        return OverlayContent(
            kind=ContentKind.ALL_COMMANDS,
            title="Syntax Help - Error",
            sections=(
                section("Error", [
                    _notice(f"Unable to load command syntax: {message}", highlight=True),
                    _notice("Please check the command definitions or contact support."),
                ]),
            ),
            scrollable=False,
        )

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def _build_command_content(self, command: CommandDefinition) -> OverlayContent:
        sections: List[OverlaySection] = []

        syntax_text = command.syntax or f"{command.name} <parameters>"
        sections.append(section("Syntax", [item(ItemKind.SYNTAX, syntax_text, highlight=True)]))
        content_length = len(syntax_text)

        description = command.description or "No description available"
        sections.append(section("Description", [item(ItemKind.DESCRIPTION, description)]))
        content_length += len(description)

        if command.parameters:
            items, content_length = self._parameter_items(command, content_length)
            if items:
                sections.append(section("Parameters", items))

        if command.examples and content_length < self.max_content_length:
            shown = command.examples[:self.MAX_EXAMPLES]
            items = []
            for example in shown:
                text = _truncate(example, self.MAX_EXAMPLE_LENGTH) if example else "No example available"
                items.append(item(ItemKind.EXAMPLE, text))
                content_length += len(text)
            if len(command.examples) > len(shown):
                items.append(_notice(f"... and {len(command.examples) - len(shown)} more examples"))
            sections.append(section("Examples", items))

        scrollable = (
            len(sections) > 2
            or len(command.parameters) > 3
            or len(command.examples) > 2
            or content_length > self.SCROLL_THRESHOLD
        )

        return OverlayContent(
            kind=ContentKind.SPECIFIC_COMMAND,
            title=f"{command.name} Command",
            sections=tuple(sections),
            scrollable=scrollable,
        )

    def _parameter_items(self, command: CommandDefinition, content_length: int):
        """Parameter lines (required first) and the updated running length."""
        # sorted() is stable: declaration order is kept within each group
        ordered = sorted(command.parameters, key=lambda p: not p.required)
        shown = ordered[:self.MAX_PARAMETERS]
        items: List[OverlayItem] = []
        truncated = False

        for index, param in enumerate(shown):
            if index > 0:
                items.append(_spacer())

            required_text = "Required" if param.required else "Optional"
            type_text = param.type.value.capitalize() if param.type else "Unknown"
            header = f"{param.name or 'unnamed'} ({type_text}) - {required_text}"
            items.append(item(ItemKind.PARAMETER, header, highlight=param.required))
            content_length += len(header)

            description = _truncate(param.description or "No description available",
                                    self.MAX_PARAMETER_DESCRIPTION)
            items.append(item(ItemKind.DESCRIPTION, description, indent=1))
            content_length += len(description)

            if param.valid_values:
                values = ", ".join(param.valid_values[:self.MAX_VALID_VALUES])
                extra = len(param.valid_values) - self.MAX_VALID_VALUES
                if extra > 0:
                    values += f", ... and {extra} more"
                items.append(item(ItemKind.DESCRIPTION, f"Valid values: {values}", indent=1))
                content_length += len(values)

            if param.format:
                items.append(item(ItemKind.DESCRIPTION, f"Format: {param.format}", indent=1))
                content_length += len(param.format)

            if content_length > self.max_content_length:
                items.append(_notice("... (content truncated for performance)", highlight=True))
                truncated = True
                break

        if not truncated and len(ordered) > len(shown):
            items.append(_notice(f"... and {len(ordered) - len(shown)} more parameters"))

        return items, content_length

    def _build_partial_content(self, prefix: str, matches: List[str]) -> OverlayContent:
        sections: List[OverlaySection] = [
            section("Matching Commands", [_notice(f'Commands starting with "{prefix}":', highlight=True)])
        ]

        grouped: Dict[CommandCategory, List[CommandDefinition]] = defaultdict(list)
        for name in matches:
            definition = self.registry.get(name)
            if definition is not None:
                grouped[definition.category].append(definition)

        content_length = 0
        stopped = False
        for category in CATEGORY_ORDER:
            commands = grouped.get(category)
            if not commands:
                continue

            items: List[OverlayItem] = []
            for index, command in enumerate(commands):
                if index > 0:
                    items.append(_spacer())
                command_text = f"{self._highlight_prefix(command.name, prefix)} - {command.description}"
                items.append(item(ItemKind.COMMAND, command_text))
                items.append(item(ItemKind.SYNTAX, command.syntax, indent=1))
                content_length += len(command_text) + len(command.syntax)

                if content_length > self.max_content_length:
                    items.append(_notice("... (content truncated for performance)", highlight=True))
                    stopped = True
                    break

            sections.append(section(self._category_title(category), items, collapsible=False, expanded=True))
            if stopped:
                break

        sections.append(section("Tip", [_notice(PARTIAL_TIP)]))

        return OverlayContent(
            kind=ContentKind.PARTIAL_COMMANDS,
            title=f'Commands matching "{prefix}" ({len(matches)})',
            sections=tuple(sections),
            scrollable=True,
        )

    @staticmethod
    def _highlight_prefix(command_name: str, prefix: str) -> str:
        """Upper-case the typed portion of a matching name ("bu" -> "BUILD")."""
        if not prefix or not command_name.lower().startswith(prefix.lower()):
            return command_name
        return prefix.upper() + command_name[len(prefix):]

    def _category_title(self, category: CommandCategory) -> str:
        title = self._category_title_cache.get(category)
        if title is None:
            title = CATEGORY_TITLES.get(category) or category.value.capitalize()
            self._category_title_cache[category] = title
        return title

    # ------------------------------------------------------------------
    # Degraded content
    # ------------------------------------------------------------------

    def _degraded_all_commands_content(self) -> OverlayContent:
        return OverlayContent(
            kind=ContentKind.ALL_COMMANDS,
            title="Available Commands (Limited)",
            sections=(
                section("Service Notice", [_notice(
                    "The command table is experiencing issues. Showing basic command information.",
                    highlight=True,
                )]),
                section("Basic Commands", [
                    item(ItemKind.COMMAND, "BUILD - Construct ships"),
                    item(ItemKind.SYNTAX, "BUILD <world> <count> <shipclass>", indent=1),
                    item(ItemKind.COMMAND, "MOVE - Move ships"),
                    item(ItemKind.SYNTAX, "MOVE <source> TO <destination>", indent=1),
                    item(ItemKind.COMMAND, "FIRE - Attack targets"),
                    item(ItemKind.SYNTAX, "FIRE <target> AT <empire>", indent=1),
                ]),
            ),
            scrollable=False,
        )

    def _degraded_command_content(self, command_name: str) -> OverlayContent:
        name = command_name.upper()
        return OverlayContent(
            kind=ContentKind.SPECIFIC_COMMAND,
            title=f"{name} Command (Limited)",
            sections=(
                section("Service Notice", [_notice(SERVICE_NOTICE, highlight=True)]),
                section("Basic Syntax", [
                    item(ItemKind.SYNTAX, f"{name} <parameters>", highlight=True),
                    _notice("Please refer to the rules for complete syntax information."),
                ]),
            ),
            scrollable=False,
        )

    def _degraded_partial_content(self, prefix: str, matches: List[str]) -> OverlayContent:
        return OverlayContent(
            kind=ContentKind.PARTIAL_COMMANDS,
            title=f'Commands matching "{prefix}" (Limited)',
            sections=(
                section("Service Notice", [_notice(SERVICE_NOTICE, highlight=True)]),
                section("Matching Commands", [
                    item(ItemKind.COMMAND, f"{self._highlight_prefix(name, prefix)} - Command details unavailable")
                    for name in matches[:self.MAX_DEGRADED_MATCHES]
                ]),
            ),
            scrollable=True,
        )

    def generate_minimal_content(self) -> OverlayContent:
        """Last-resort panel when nothing else can be produced."""
        return OverlayContent(
            kind=ContentKind.ALL_COMMANDS,
            title="Syntax Help - Service Unavailable",
            sections=(
                section("Error", [_notice(
                    "Syntax overlay service is temporarily unavailable. Please try refreshing the page.",
                    highlight=True,
                )]),
            ),
            scrollable=False,
        )

    # ------------------------------------------------------------------
    # Inspection and post-processing
    # ------------------------------------------------------------------

    def is_content_empty(self, content: OverlayContent) -> bool:
        return not content.sections or all(not s.items for s in content.sections)

    def get_content_summary(self, content: OverlayContent) -> str:
        item_count = sum(len(s.items) for s in content.sections)
        return (
            f"{content.kind.value} content: {len(content.sections)} sections, "
            f"{item_count} items, scrollable: {content.scrollable}"
        )

    def validate_content(self, content) -> bool:
        """True if content is a well-formed OverlayContent."""
        if not isinstance(content, OverlayContent) or not content.title:
            return False
        if not isinstance(content.kind, ContentKind) or not isinstance(content.sections, tuple):
            return False
        for s in content.sections:
            if not isinstance(s, OverlaySection) or not isinstance(s.items, tuple):
                return False
            for entry in s.items:
                if not isinstance(entry, OverlayItem) or not isinstance(entry.kind, ItemKind):
                    return False
                if not isinstance(entry.text, str):
                    return False
        return True

    def get_content_length(self, content: OverlayContent) -> int:
        """Characters in the title, section titles and item texts."""
        total = len(content.title)
        for s in content.sections:
            if s.title:
                total += len(s.title)
            total += sum(len(entry.text) for entry in s.items)
        return total

    def get_performance_metrics(self, content: OverlayContent) -> PerformanceMetrics:
        total_items = sum(len(s.items) for s in content.sections)
        total_length = self.get_content_length(content)
        # Rough render-cost heuristic in milliseconds
        estimated_render_time = max(1.0, total_length / 1000 + total_items * 0.5)
        return PerformanceMetrics(
            total_sections=len(content.sections),
            total_items=total_items,
            total_length=total_length,
            estimated_render_time=estimated_render_time,
        )

    def is_content_too_large(self, content: OverlayContent) -> bool:
        metrics = self.get_performance_metrics(content)
        return (
            metrics.total_length > self.max_content_length
            or metrics.total_items > self.MAX_RENDER_ITEMS
            or metrics.estimated_render_time > self.MAX_RENDER_TIME_MS
        )

    def optimize_content(self, content: OverlayContent) -> OverlayContent:
        """
        Shrink oversized content.

        Caps items per section (with a truncation notice), marks the title
        "(Optimized)" and forces scrolling. Content within budget is
        returned unchanged.
        """
        if not self.is_content_too_large(content):
            return content

        limit = self.MAX_ITEMS_PER_SECTION
        sections = []
        for s in content.sections:
            items = list(s.items[:limit])
            if len(s.items) > limit:
                items.append(_notice(
                    f"... and {len(s.items) - limit} more items (truncated for performance)",
                    highlight=True,
                ))
            sections.append(replace(s, items=tuple(items)))

        return replace(
            content,
            sections=tuple(sections),
            title=f"{content.title} (Optimized)",
            scrollable=True,
        )

    def filter_content(self, content: OverlayContent, search_term: str) -> OverlayContent:
        """Keep items whose text (or section title) contains search_term."""
        if not search_term or not search_term.strip():
            return content

        term = search_term.lower()
        sections = []
        for s in content.sections:
            title_hit = bool(s.title) and term in s.title.lower()
            items = tuple(entry for entry in s.items if title_hit or term in entry.text.lower())
            if items:
                sections.append(replace(s, items=items))

        return replace(content, sections=tuple(sections), title=f"{content.title} (filtered)")

    def clear_caches(self) -> None:
        self._category_title_cache.clear()
        self._command_cache.clear()

    def get_cache_stats(self) -> dict:
        return {
            "category_titles": len(self._category_title_cache),
            "command_cards": len(self._command_cache),
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _registry_healthy(self) -> bool:
        try:
            return bool(self.registry.is_healthy())
        except Exception as e:
            self.telemetry.log_error(SERVICE, "Registry health check failed", e)
            return False

    def _sync_with_registry(self) -> None:
        version = getattr(self.registry, "version", None)
        if version != self._registry_version:
            self._command_cache.clear()
            self._registry_version = version

    def _report_duration(self, operation: str, start: float, threshold_ms: float) -> None:
        duration_ms = (time.perf_counter() - start) * 1000
        if duration_ms > threshold_ms:
            self.telemetry.log_performance(SERVICE, operation, duration_ms, threshold_ms)
