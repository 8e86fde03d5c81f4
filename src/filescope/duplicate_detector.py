"""Occurrence counting of file names across the whole document text."""

from __future__ import annotations

from typing import Dict, List

from config import Settings
from .logging_utils import get_logger
from .tokenizer import MIN_NAME_LENGTH

logger = get_logger(__name__)


class DuplicateDetector:
    """Report file names that occur more than once in a text.

    The scan runs over the text as a single unit, independently of the
    line-oriented tokenizer, and counts every match.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._pattern = settings.compiled_pattern("filename")

    def count_occurrences(self, text: str) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for match in self._pattern.finditer(text):
            name = match.group(1).strip().lower()
            if len(name) < MIN_NAME_LENGTH:
                continue
            counts[name] = counts.get(name, 0) + 1
        return counts

    def find_duplicates(self, text: str) -> List[str]:
        duplicates = [name for name, count in self.count_occurrences(text).items() if count > 1]
        if duplicates:
            logger.debug("Detected %s duplicated file names", len(duplicates))
        return duplicates
