"""
Test suite for fuzzy keyword matching.
Tests typo tolerance for order keywords.
"""

import pytest

from orders_overlay.utils.fuzzy_matcher import FuzzyMatcher

COMMANDS = [
    "AUTHORIZE", "BUILD", "DENY", "DEPLOY", "DESIGN", "DESTRUCT", "FIRE",
    "GIVE", "LOAD", "MOVE", "POOL", "REPAIR", "TOGGLE", "TRANSFER",
]


@pytest.fixture
def matcher():
    return FuzzyMatcher()


class TestFuzzyMatcherCore:
    """Test FuzzyMatcher class directly."""

    def test_exact_match(self, matcher):
        """Exact matches should return score 100."""
        result = matcher.match_with_context("BUILD", COMMANDS)
        assert result["action"] == "exact"
        assert result["match"] == "BUILD"
        assert result["score"] == 100

    def test_case_insensitive_exact_match(self, matcher):
        result = matcher.match_with_context("transfer", COMMANDS)
        assert result["action"] == "exact"
        assert result["match"] == "TRANSFER"

    def test_auto_correct_high_confidence(self, matcher):
        """One transposed letter in a long keyword auto-corrects."""
        result = matcher.match_with_context("TRANSFRE", COMMANDS)
        assert result["action"] == "auto_correct"
        assert result["match"] == "TRANSFER"
        assert result["score"] >= 80

    def test_error_low_confidence(self, matcher):
        result = matcher.match_with_context("QWXZKJ", COMMANDS)
        assert result["action"] == "error"
        assert result["match"] is None
        assert len(result["suggestions"]) == 3

    def test_empty_inputs(self, matcher):
        assert matcher.match_with_context("", COMMANDS)["action"] == "error"
        assert matcher.match("BUILD", []) is None

    def test_match_returns_candidate_casing(self, matcher):
        match = matcher.match("authorise", COMMANDS)
        assert match is not None
        assert match[0] == "AUTHORIZE"

    def test_short_queries_use_lower_thresholds(self, matcher):
        assert matcher._get_thresholds("FI") == (100, 50)
        assert matcher._get_thresholds("FIER") == (70, 50)
        assert matcher._get_thresholds("TRANSFR") == (80, 60)

    def test_one_letter_fragment_never_auto_corrects(self, matcher):
        """A keyword still being typed ("F") is not a typo of FIRE."""
        assert matcher.match_with_context("F", COMMANDS)["action"] != "auto_correct"
        assert matcher.match("F", COMMANDS) is None

    def test_four_letter_keyword_typo(self, matcher):
        result = matcher.match_with_context("FIER", COMMANDS)
        assert result["action"] == "auto_correct"
        assert result["match"] == "FIRE"

    def test_closest(self, matcher):
        closest = matcher.closest("MOVV", COMMANDS, limit=2)
        assert closest[0] == "MOVE"
        assert len(closest) == 2
        assert matcher.closest("MOVV", COMMANDS, limit=0) == []
