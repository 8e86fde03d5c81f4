"""Core data models for the FileScope analysis pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

Confidence = Literal["high", "medium", "low"]

MISCELLANEOUS = "Miscellaneous"


@dataclass
class ExtractedName:
    """A single file-name token recognized in document text."""

    name: str
    extension: str
    line: Optional[int] = None
    confidence: Optional[Confidence] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "extension": self.extension}
        if self.line is not None:
            data["line"] = self.line
        if self.confidence is not None:
            data["confidence"] = self.confidence
        return data


@dataclass
class PatternGroup:
    """File names sharing a naming convention."""

    pattern: str
    files: List[ExtractedName] = field(default_factory=list)
    description: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.files)

    @property
    def is_miscellaneous(self) -> bool:
        return self.pattern == MISCELLANEOUS

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "pattern": self.pattern,
            "count": self.count,
            "files": [item.to_dict() for item in self.files],
        }
        if self.description is not None:
            data["description"] = self.description
        return data


def order_groups(groups: List[PatternGroup]) -> List[PatternGroup]:
    """Sort groups by descending count, keeping Miscellaneous last."""
    ordered = sorted(groups, key=lambda group: group.count, reverse=True)
    return [g for g in ordered if not g.is_miscellaneous] + [g for g in ordered if g.is_miscellaneous]


@dataclass
class ExtractionResult:
    """Engine output for one document or one merged batch."""

    patterns: List[PatternGroup] = field(default_factory=list)
    duplicates: List[str] = field(default_factory=list)
    ai_enhanced: bool = False
    summary: Optional[str] = None
    document_type: Optional[str] = None
    source_files: List[str] = field(default_factory=list)

    @property
    def total_found(self) -> int:
        return sum(group.count for group in self.patterns)

    def is_duplicate(self, name: str) -> bool:
        return name.lower() in set(self.duplicates)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "total_found": self.total_found,
            "patterns": [group.to_dict() for group in self.patterns],
            "duplicates": list(self.duplicates),
            "ai_enhanced": self.ai_enhanced,
        }
        if self.summary is not None:
            data["summary"] = self.summary
        if self.document_type is not None:
            data["document_type"] = self.document_type
        if self.source_files:
            data["source_files"] = list(self.source_files)
        return data


@dataclass
class ParsedDocument:
    """Plain text recovered from an uploaded document."""

    file_name: str
    file_type: str
    text: str
    page_count: Optional[int] = None
    backend: Optional[str] = None


@dataclass
class DocumentAnalysis:
    """Outcome of analyzing one submitted document."""

    file_name: str
    file_type: str
    success: bool
    analysis: Optional[ExtractionResult] = None
    error: Optional[str] = None
    text_length: Optional[int] = None
    page_count: Optional[int] = None
    stage_durations: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_name": self.file_name,
            "file_type": self.file_type,
            "success": self.success,
            "error": self.error,
            "text_length": self.text_length,
            "page_count": self.page_count,
            "analysis": self.analysis.to_dict() if self.analysis else None,
            "stage_durations": dict(self.stage_durations),
        }


@dataclass
class BatchResult:
    """Per-file outcomes for a batch plus the merged analysis."""

    results: List[DocumentAnalysis]
    combined: ExtractionResult
    stage_durations: Dict[str, float] = field(default_factory=dict)

    @property
    def total_files(self) -> int:
        return len(self.results)

    @property
    def successful_files(self) -> int:
        return sum(1 for item in self.results if item.success)

    @property
    def failed_files(self) -> int:
        return self.total_files - self.successful_files

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_files": self.total_files,
            "successful_files": self.successful_files,
            "failed_files": self.failed_files,
            "results": [item.to_dict() for item in self.results],
            "combined_analysis": self.combined.to_dict(),
            "stage_durations": dict(self.stage_durations),
        }
