"""
End-to-end tests for the overlay pipeline: (text, cursor) to content.
"""

import pytest

from orders_overlay.commands.registry import CommandRegistry
from orders_overlay.overlay.models import ContentKind, ContextType
from orders_overlay.overlay.service import OverlayService
from orders_overlay.telemetry import OverlayTelemetry


@pytest.fixture
def service():
    return OverlayService(CommandRegistry(telemetry=OverlayTelemetry()))


class TestEvaluate:
    """Typing through an order sheet."""

    def test_empty_sheet_shows_catalogue(self, service):
        context, content = service.evaluate("", 0)
        assert context.type == ContextType.ALL_COMMANDS
        assert content.title == "Available Commands (14)"

    def test_command_line_shows_card(self, service):
        context, content = service.evaluate("BUILD Homeworld 5 Destroyer", 10)
        assert context.command_name == "BUILD"
        assert content.sections[0].title == "Syntax"
        assert "BUILD" in content.sections[0].items[0].text

    def test_single_partial_match_shows_card(self, service):
        context, content = service.evaluate("BU", 2)
        assert context.type == ContextType.PARTIAL_COMMANDS
        assert context.matches == ("BUILD",)
        assert content == service.generator.generate_command_content("BUILD")

    def test_multiple_partial_matches(self, service):
        context, content = service.evaluate("TOGGLE PUBLIC Ship1\nt", 21)
        assert context.line_number == 1
        assert context.matches == ("TOGGLE", "TRANSFER")
        assert content.kind == ContentKind.PARTIAL_COMMANDS

    def test_comment_line(self, service):
        context, content = service.evaluate("# comment\nBUILD x", 3)
        assert context.type == ContextType.ALL_COMMANDS
        assert content.kind == ContentKind.ALL_COMMANDS

    def test_unknown_keyword(self, service):
        assert service.registry.get("nonexistent") is None
        _, content = service.evaluate("nonexistent ships", 4)
        assert content.kind == ContentKind.ALL_COMMANDS

    def test_deterministic_regardless_of_history(self, service):
        text = "MOVE (1,2) TO (3,4)\nFIRE ASC Fleet AT Rome\nde"
        first = [service.evaluate(text, offset) for offset in range(len(text) + 1)]
        service.clear_caches()
        second = [service.evaluate(text, offset) for offset in reversed(range(len(text) + 1))]
        assert first == list(reversed(second))


class TestStatus:
    """Tests for status()."""

    def test_status_shape(self, service):
        service.evaluate("FIRE x", 2)
        status = service.status()

        assert status["healthy"] is True
        assert status["registry"]["command_count"] == 14
        assert status["analyzer_cache"]["line_cache"] == 1
        assert "command_cards" in status["generator_cache"]
        assert "total_logs" in status["telemetry"]

    def test_default_construction(self):
        service = OverlayService()
        assert service.registry.telemetry is service.telemetry
        assert service.analyzer.registry is service.registry
        assert service.generator.registry is service.registry
