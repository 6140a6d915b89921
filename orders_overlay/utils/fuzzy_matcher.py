"""
Fuzzy keyword matching for the orders overlay.

Turns a mistyped order keyword ("BIULD", "Trasnfer") into "did you mean"
suggestions. Used by CommandRegistry.suggest() and the HTTP lookup route;
the context analyzer itself only does exact and prefix matching.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from fuzzywuzzy import fuzz, process

# (longest keyword length, auto-correct score, suggest score), checked in order.
# One- and two-letter fragments ("F", "MO") are usually a keyword still being
# typed, so only an exact hit is ever confident. Four-letter keywords (FIRE,
# MOVE, LOAD, POOL, GIVE, DENY) lose a quarter of their score per typo.
KEYWORD_THRESHOLDS: Tuple[Tuple[int, int, int], ...] = (
    (2, 100, 50),
    (4, 70, 50),
)
DEFAULT_THRESHOLDS = (80, 60)

# Keywords this short also get credit for containing the query ("FIR" in FIRE)
SHORT_KEYWORD = 4


class FuzzyMatcher:
    """
    Typo-tolerant matcher over a list of command keywords.

    Scores run 0-100 and are compared case-insensitively; the keyword is
    always returned with the casing it was registered under.
    """

    def _get_thresholds(self, query: str) -> Tuple[int, int]:
        """(auto_correct, suggest) scores for a query of this length."""
        for longest, auto_correct, suggest in KEYWORD_THRESHOLDS:
            if len(query) <= longest:
                return (auto_correct, suggest)
        return DEFAULT_THRESHOLDS

    def _get_best_score(self, query: str, keyword: str) -> int:
        typed, target = query.upper(), keyword.upper()
        score = fuzz.ratio(typed, target)
        if len(typed) <= 2:
            # partial_ratio would give "F" 100 against every keyword with an F
            return score
        if len(typed) <= SHORT_KEYWORD or len(target) <= SHORT_KEYWORD:
            score = max(score, fuzz.partial_ratio(typed, target))
        return score

    def _rank(self, query: str, keywords: Sequence[str]) -> Tuple[Optional[str], int]:
        """Highest-scoring keyword; the first registered wins a tie."""
        best, best_score = None, 0
        for keyword in keywords:
            score = self._get_best_score(query, keyword)
            if score > best_score:
                best, best_score = keyword, score
        return best, best_score

    def match(
        self,
        query: str,
        candidates: Sequence[str],
        threshold: int = None
    ) -> Optional[Tuple[str, int]]:
        """
        Best keyword for a mistyped word, if it clears the threshold.

        Args:
            query: Word as typed (any case)
            candidates: Registered keywords
            threshold: Minimum score; the auto-correct score for the query's
                length if None

        Returns:
            (keyword, score) or None

        Example:
            >>> FuzzyMatcher().match("BIULD", ["BUILD", "MOVE", "FIRE"])
            ('BUILD', 80)
        """
        if not query or not candidates:
            return None
        if threshold is None:
            threshold = self._get_thresholds(query)[0]

        keyword, score = self._rank(query, candidates)
        if keyword is None or score < threshold:
            return None
        return (keyword, score)

    def match_with_context(self, query: str, candidates: Sequence[str]) -> Dict:
        """
        Graded verdict for a word that may be a keyword.

        Returns:
            Dict with:
            - action: "exact", "auto_correct", "suggest" or "error"
            - match: Keyword to use or offer (None for "error")
            - score: Similarity score
            - suggestions: Closest keywords (for "suggest" and "error")
        """
        if not query or not candidates:
            return {"action": "error", "match": None, "score": 0, "suggestions": []}

        typed = query.upper()
        exact = next((keyword for keyword in candidates if keyword.upper() == typed), None)
        if exact is not None:
            return {"action": "exact", "match": exact, "score": 100, "suggestions": []}

        auto_correct, suggest = self._get_thresholds(query)
        keyword, score = self._rank(query, candidates)

        if keyword is not None and score >= auto_correct:
            return {"action": "auto_correct", "match": keyword, "score": score, "suggestions": []}
        if keyword is not None and score >= suggest:
            return {"action": "suggest", "match": keyword, "score": score, "suggestions": [keyword]}

        return {
            "action": "error",
            "match": None,
            "score": 0,
            "suggestions": self.closest(query, candidates, limit=3),
        }

    def closest(self, query: str, candidates: Sequence[str], limit: int = 3) -> List[str]:
        """Top `limit` keywords by plain ratio, best first, no threshold."""
        if not query or not candidates or limit < 1:
            return []
        by_upper = {c.upper(): c for c in candidates}
        ranked = process.extract(query.upper(), list(by_upper), scorer=fuzz.ratio, limit=limit)
        return [by_upper[keyword] for keyword, _score in ranked]
