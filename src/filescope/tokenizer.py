"""Line-oriented extraction of file-name tokens from raw document text."""

from __future__ import annotations

import re
from typing import List, Optional, Set

from config import Settings
from .logging_utils import get_logger
from .pipeline import ExtractedName

logger = get_logger(__name__)

_LEADING_DELIMITERS = re.compile(r"""^[\s"'(<\[{,;:]+""")
MIN_NAME_LENGTH = 3


def clean_candidate(raw: str) -> str:
    """Strip delimiter artifacts and surrounding whitespace from a regex capture."""
    return _LEADING_DELIMITERS.sub("", raw.strip()).strip()


def extension_of(name: str) -> str:
    return name.rsplit(".", 1)[-1].lower()


class FileNameTokenizer:
    """Scan text line by line and emit each distinct file name once."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._pattern = settings.compiled_pattern("filename")

    def tokenize(self, text: str, *, seen: Optional[Set[str]] = None) -> List[ExtractedName]:
        """
        Extract file names from ``text``.

        Args:
            text: Raw document text; lines are separated by ``\\n``.
            seen: Optional case-insensitive set shared across calls. Every match is
                added to it; only names absent from it are emitted.

        Returns:
            Extracted names in discovery order, one entry per case-insensitive name.
        """
        seen = set() if seen is None else seen
        names: List[ExtractedName] = []

        for line_index, line in enumerate(text.split("\n")):
            for match in self._pattern.finditer(line):
                candidate = match.group(1).strip()
                if len(candidate) < MIN_NAME_LENGTH:
                    continue
                name = clean_candidate(candidate)
                if len(name) < MIN_NAME_LENGTH:
                    continue
                key = name.lower()
                if key not in seen:
                    names.append(
                        ExtractedName(name=name, extension=extension_of(name), line=line_index + 1)
                    )
                seen.add(key)

        logger.debug("Tokenizer found %s distinct file names", len(names))
        return names
