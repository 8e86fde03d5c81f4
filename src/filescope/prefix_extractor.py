"""Literal lead-in extraction used as a secondary grouping signal."""

from __future__ import annotations

import re

from .pattern_normalizer import split_extension

_PREFIX_PATTERN = re.compile(r"^(?:[A-Za-z]+[-_]?|[A-Z0-9]+[-_])")
FALLBACK_LENGTH = 4


class PrefixExtractor:
    """Return the static part of a name that precedes its variable content."""

    def extract(self, base_name: str) -> str:
        match = _PREFIX_PATTERN.match(base_name)
        if match:
            return match.group(0)
        return base_name[:FALLBACK_LENGTH]

    def extract_from_name(self, file_name: str) -> str:
        base, _ = split_extension(file_name)
        return self.extract(base)
