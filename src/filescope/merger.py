"""Combine per-document extraction results into one batch-level result."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .logging_utils import get_logger
from .pipeline import ExtractedName, ExtractionResult, PatternGroup, order_groups

logger = get_logger(__name__)


@dataclass
class _MergedPattern:
    files: List[ExtractedName] = field(default_factory=list)
    description: Optional[str] = None


class CrossDocumentMerger:
    """Merge results keyed on the exact pattern string.

    Clustering is not re-run: two documents whose files normalize to the same
    pattern string share one group even when their literal prefixes differ.
    """

    def merge(self, results: Sequence[Tuple[str, ExtractionResult]]) -> ExtractionResult:
        merged: Dict[str, _MergedPattern] = {}
        duplicates: Dict[str, None] = {}
        source_files: List[str] = []
        ai_enhanced = False

        for source_name, result in results:
            source_files.append(source_name)
            ai_enhanced = ai_enhanced or result.ai_enhanced
            for name in result.duplicates:
                duplicates.setdefault(name, None)
            for group in result.patterns:
                existing = merged.get(group.pattern)
                if existing is None:
                    merged[group.pattern] = _MergedPattern(list(group.files), group.description)
                else:
                    existing.files.extend(group.files)

        patterns = order_groups(
            [
                PatternGroup(pattern=pattern, files=entry.files, description=entry.description)
                for pattern, entry in merged.items()
            ]
        )

        combined = ExtractionResult(
            patterns=patterns,
            duplicates=list(duplicates),
            ai_enhanced=ai_enhanced,
            source_files=source_files,
        )
        logger.info(
            "Merged %s documents into %s pattern groups (%s files)",
            len(source_files),
            len(patterns),
            combined.total_found,
        )
        return combined
