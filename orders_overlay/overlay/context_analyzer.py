"""
Context analysis for the orders overlay.

Decides, for the text buffer and cursor offset of the order editor, which
help the overlay should show: the whole catalogue, one command, or the
commands matching a half-typed keyword. Runs on every keystroke, so it only
ever looks at the cursor's line and caches classifications of lines it has
seen recently.

Line classification:
- blank           -> all commands
- comment         -> all commands  ("#", ";" or "//" first)
- known keyword   -> that command   ("build Homeworld 5 Destroyer")
- keyword prefix  -> matching commands ("BU" -> BUILD)
- anything else   -> all commands
"""

import re
from enum import Enum
from typing import List, Optional, Tuple

from orders_overlay import config
from orders_overlay.commands.registry import CommandRegistry
from orders_overlay.overlay.bounded_cache import BoundedCache
from orders_overlay.overlay.models import OverlayContext
from orders_overlay.telemetry import OverlayTelemetry

SERVICE = "ContextAnalyzer"

COMMENT_CHARS = ("#", ";")
COMMENT_PREFIX = "//"

# Only purely alphabetic first words are treated as a half-typed keyword
PARTIAL_KEYWORD = re.compile(r"[A-Za-z]+")


class LineType(str, Enum):
    BLANK = "blank"
    COMMENT = "comment"
    COMMAND = "command"
    OTHER = "other"


def _first_word(trimmed: str) -> str:
    words = trimmed.split(None, 1)
    return words[0] if words else ""


class ContextAnalyzer:
    """
    Resolves (text, cursor) to an OverlayContext.

    analyze_context() never raises and depends only on its arguments and
    the registry contents; caching changes latency, never results.

    Args:
        registry: Command table to match keywords against
        telemetry: Logging port (default: the registry's)
        cache_size: Entries per cache
        max_cached_line_length: Longer lines are classified but not cached
        use_cache: Set False to disable both caches
    """

    def __init__(
        self,
        registry: CommandRegistry,
        telemetry: OverlayTelemetry = None,
        cache_size: int = None,
        max_cached_line_length: int = None,
        use_cache: bool = True,
    ):
        self.registry = registry
        self.telemetry = telemetry or getattr(registry, "telemetry", None) or OverlayTelemetry()
        self.use_cache = use_cache
        self.max_cached_line_length = (
            max_cached_line_length if max_cached_line_length is not None else config.MAX_CACHED_LINE_LENGTH
        )

        size = cache_size if cache_size is not None else config.CACHE_SIZE
        # (trimmed line, line number) -> LineType
        self._line_cache = BoundedCache(size)
        # trimmed line -> canonical command name ("" when the line has none)
        self._command_cache = BoundedCache(size)
        self._registry_version = getattr(registry, "version", None)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def analyze_context(self, text, cursor_position=0) -> OverlayContext:
        """
        Analyze the cursor's line to decide what the overlay shows.

        Args:
            text: Complete order sheet (non-strings are treated as empty)
            cursor_position: Offset into text; clamped to [0, len(text)]

        Returns:
            OverlayContext for the line under the cursor
        """
        try:
            text = self._normalize_text(text)
            cursor_position = self._clamp_cursor(cursor_position, len(text))

            if cursor_position == 0 and not text:
                return OverlayContext.all_commands()

            self._sync_with_registry()

            line_number, line_content = self._line_at(text, cursor_position)
            line_type = self._classify_line(line_content, line_number)

            if line_type in (LineType.BLANK, LineType.COMMENT):
                return OverlayContext.all_commands(line_content, cursor_position, line_number)

            if line_type == LineType.COMMAND:
                command_name = self._command_name(line_content)
                if command_name:
                    return OverlayContext.specific_command(
                        command_name, line_content, cursor_position, line_number
                    )

            partial = self._partial_match(line_content)
            if partial:
                prefix, matches = partial
                return OverlayContext.partial_commands(
                    prefix, matches, line_content, cursor_position, line_number
                )

            return OverlayContext.all_commands(line_content, cursor_position, line_number)
        except Exception as e:
            self.telemetry.log_error(SERVICE, "Error in analyze_context", e)
            return OverlayContext.all_commands()

    def get_current_line_number(self, text, cursor_position) -> int:
        try:
            text = self._normalize_text(text)
            return self._line_at(text, self._clamp_cursor(cursor_position, len(text)))[0]
        except Exception as e:
            self.telemetry.log_error(SERVICE, "Error in get_current_line_number", e)
            return 0

    def get_current_line_content(self, text, cursor_position) -> str:
        try:
            text = self._normalize_text(text)
            return self._line_at(text, self._clamp_cursor(cursor_position, len(text)))[1]
        except Exception as e:
            self.telemetry.log_error(SERVICE, "Error in get_current_line_content", e)
            return ""

    def get_cursor_position_in_line(self, text, cursor_position) -> int:
        """Column of the cursor within its line (0-based)."""
        try:
            text = self._normalize_text(text)
            cursor_position = self._clamp_cursor(cursor_position, len(text))
            return cursor_position - (text.rfind("\n", 0, cursor_position) + 1)
        except Exception as e:
            self.telemetry.log_error(SERVICE, "Error in get_cursor_position_in_line", e)
            return 0

    def is_cursor_at_line_start(self, text, cursor_position) -> bool:
        return self.get_cursor_position_in_line(text, cursor_position) == 0

    def is_cursor_at_line_end(self, text, cursor_position) -> bool:
        try:
            text = self._normalize_text(text)
            cursor_position = self._clamp_cursor(cursor_position, len(text))
            line_end = text.find("\n", cursor_position)
            if line_end == -1:
                return cursor_position == len(text)
            # Cursor sitting before a "\r\n" is still at the end of the line
            return text[cursor_position:line_end] in ("", "\r")
        except Exception as e:
            self.telemetry.log_error(SERVICE, "Error in is_cursor_at_line_end", e)
            return False

    def clear_caches(self) -> None:
        self._line_cache.clear()
        self._command_cache.clear()

    def get_cache_stats(self) -> dict:
        return {
            "line_cache": len(self._line_cache),
            "command_cache": len(self._command_cache),
            "capacity": self._line_cache.capacity,
        }

    # ------------------------------------------------------------------
    # Input handling
    # ------------------------------------------------------------------

    def _normalize_text(self, text) -> str:
        if isinstance(text, str):
            return text
        if text is not None:
            self.telemetry.log_debug(SERVICE, f"Invalid text input: {type(text).__name__}")
        return ""

    def _clamp_cursor(self, cursor_position, text_length: int) -> int:
        if isinstance(cursor_position, bool) or not isinstance(cursor_position, int):
            if cursor_position is not None:
                self.telemetry.log_debug(SERVICE, f"Invalid cursor position: {cursor_position!r}")
            return 0
        if cursor_position < 0:
            return 0
        return min(cursor_position, text_length)

    def _line_at(self, text: str, cursor_position: int) -> Tuple[int, str]:
        """
        Line number and content around the cursor.

        Only the text between the surrounding separators is scanned; the
        rest of the buffer is never split. A cursor just after "\n" is on
        the following line.
        """
        line_start = text.rfind("\n", 0, cursor_position) + 1
        line_end = text.find("\n", cursor_position)
        if line_end == -1:
            line_end = len(text)

        line_number = text.count("\n", 0, line_start)
        line_content = text[line_start:line_end]
        if line_content.endswith("\r"):
            line_content = line_content[:-1]
        return line_number, line_content

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def _sync_with_registry(self) -> None:
        """Drop caches built against an older registry table."""
        version = getattr(self.registry, "version", None)
        if version != self._registry_version:
            self.clear_caches()
            self._registry_version = version

    def _cacheable(self, line: str) -> bool:
        return self.use_cache and len(line) <= self.max_cached_line_length

    def _classify_line(self, line: str, line_number: int) -> LineType:
        trimmed = line.strip()
        key = (trimmed, line_number)

        if self._cacheable(line):
            cached = self._line_cache.get(key)
            if cached is not None:
                return cached

        line_type = self._analyze_line_type(trimmed)

        if self._cacheable(line):
            self._line_cache.put(key, line_type)
        return line_type

    def _analyze_line_type(self, trimmed: str) -> LineType:
        if not trimmed:
            return LineType.BLANK

        if trimmed[0] in COMMENT_CHARS or trimmed.startswith(COMMENT_PREFIX):
            return LineType.COMMENT

        first_word = _first_word(trimmed)
        if self.registry.get(first_word) is not None:
            return LineType.COMMAND
        return LineType.OTHER

    def _command_name(self, line: str) -> Optional[str]:
        """Canonical name of the line's keyword, or None."""
        trimmed = line.strip()

        if self._cacheable(line):
            cached = self._command_cache.get(trimmed)
            if cached is not None:
                return cached or None

        definition = self.registry.get(_first_word(trimmed))
        command_name = definition.name if definition is not None else ""

        if self._cacheable(line):
            self._command_cache.put(trimmed, command_name)
        return command_name or None

    def _partial_match(self, line: str) -> Optional[Tuple[str, List[str]]]:
        """
        (prefix, sorted matches) when the first word is a half-typed keyword.

        Non-alphabetic words never match, and a word that already equals a
        keyword is not partial.
        """
        first_word = _first_word(line.strip())
        if not first_word or not PARTIAL_KEYWORD.fullmatch(first_word):
            return None

        matches = self.registry.match_prefix(first_word)
        if not matches:
            return None

        first_upper = first_word.upper()
        if any(name.upper() == first_upper for name in matches):
            return None

        return first_word, sorted(set(matches))
