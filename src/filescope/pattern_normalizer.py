"""Placeholder-based canonicalization of file names into pattern strings."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from config import Settings
from .logging_utils import get_logger

logger = get_logger(__name__)

PLACEHOLDERS: Tuple[str, ...] = ("DATE", "YYYY", "XXX", "XX", "X", "VAR")


@dataclass(frozen=True)
class NormalizationRule:
    """One substitution step; rules run in order over the previous step's output."""

    name: str
    pattern: re.Pattern[str]
    replacement: str

    def apply(self, value: str) -> str:
        return self.pattern.sub(self.replacement, value)


def _rule(name: str, pattern: str, replacement: str, flags: int = 0) -> NormalizationRule:
    return NormalizationRule(name, re.compile(pattern, flags | re.ASCII), replacement)


BASE_RULES: Tuple[NormalizationRule, ...] = (
    _rule("iso_date", r"\d{4}[-_]?\d{2}[-_]?\d{2}", "DATE"),
    _rule("us_date", r"\d{2}[-_]?\d{2}[-_]?\d{4}", "DATE"),
    _rule("year", r"(?:19|20)\d{2}", "YYYY"),
    _rule("long_number", r"\d{3,}", "XXX"),
    _rule("two_digits", r"\d{2}", "XX"),
    _rule("digit", r"\d", "X"),
    _rule("sequence_letter", r"([-_])[A-Z](?=[-_.]|$)", r"\1X", re.IGNORECASE),
)

VARIABLE_SEGMENT_RULE = _rule(
    "variable_segment",
    r"([-_])[A-Za-z]+([-_])(YYYY|DATE|XXX|XX|X)",
    r"\1VAR\2\3",
)


def split_extension(file_name: str) -> Tuple[str, str]:
    """Split ``name.ext`` into base and extension; the extension keeps its case."""
    base, dot, extension = file_name.rpartition(".")
    if not dot:
        return file_name, ""
    return base, extension


class PatternNormalizer:
    """Map file names onto canonical pattern strings such as ``Invoice_XXX.pdf``."""

    def __init__(self, settings: Settings):
        self.settings = settings
        rules: List[NormalizationRule] = list(BASE_RULES)
        if settings.collapse_variable_segments:
            rules.append(VARIABLE_SEGMENT_RULE)
        self.rules: Sequence[NormalizationRule] = tuple(rules)

    def normalize_base(self, base: str) -> str:
        for rule in self.rules:
            base = rule.apply(base)
        return base

    def normalize(self, file_name: str) -> str:
        base, extension = split_extension(file_name)
        pattern = self.normalize_base(base)
        if extension:
            pattern = f"{pattern}.{extension}"
        logger.debug("Normalized %s -> %s", file_name, pattern)
        return pattern
