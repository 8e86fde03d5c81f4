"""Similarity scoring between canonical pattern strings."""

from __future__ import annotations

from rapidfuzz.distance import Prefix

from config import Settings


class PatternMatcher:
    """Score how closely two pattern skeletons align from their first character."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def score(self, a: str, b: str) -> float:
        """Common leading run length divided by the longer length; 1.0 when identical."""
        if a == b:
            return 1.0
        longest = max(len(a), len(b))
        return Prefix.similarity(a, b) / longest

    def is_similar(self, a: str, b: str) -> bool:
        return self.score(a, b) > self.settings.similarity_threshold
