"""Single-document file-name analysis: tokenize, count duplicates, cluster."""

from __future__ import annotations

from typing import Optional

from config import Settings
from .clusterer import PatternClusterer
from .duplicate_detector import DuplicateDetector
from .logging_utils import get_logger
from .pipeline import ExtractionResult
from .tokenizer import FileNameTokenizer

logger = get_logger(__name__)


class FileNameAnalyzer:
    """Run the regex engine over one document's raw text."""

    def __init__(
        self,
        settings: Settings,
        *,
        tokenizer: Optional[FileNameTokenizer] = None,
        duplicate_detector: Optional[DuplicateDetector] = None,
        clusterer: Optional[PatternClusterer] = None,
    ):
        self.settings = settings
        self.tokenizer = tokenizer or FileNameTokenizer(settings)
        self.duplicate_detector = duplicate_detector or DuplicateDetector(settings)
        self.clusterer = clusterer or PatternClusterer(settings)

    def analyze(self, text: str) -> ExtractionResult:
        names = self.tokenizer.tokenize(text)
        duplicates = self.duplicate_detector.find_duplicates(text)
        patterns = self.clusterer.cluster(names)
        result = ExtractionResult(patterns=patterns, duplicates=duplicates, ai_enhanced=False)
        logger.debug(
            "Analysis found %s names in %s groups (%s duplicates)",
            result.total_found,
            len(result.patterns),
            len(duplicates),
        )
        return result
