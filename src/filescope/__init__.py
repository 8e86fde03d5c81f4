"""Expose FileScope core modules."""

from .pipeline import (
    MISCELLANEOUS,
    BatchResult,
    DocumentAnalysis,
    ExtractedName,
    ExtractionResult,
    ParsedDocument,
    PatternGroup,
)
from .tokenizer import FileNameTokenizer
from .duplicate_detector import DuplicateDetector
from .pattern_normalizer import NormalizationRule, PatternNormalizer
from .prefix_extractor import PrefixExtractor
from .pattern_matcher import PatternMatcher
from .clusterer import PatternClusterer
from .analyzer import FileNameAnalyzer
from .merger import CrossDocumentMerger
from .ai_schema import AIAnalysisPayload, AIPayloadError, parse_ai_payload
from .document_parser import DocumentParseError, DocumentParser
from .archive import ArchiveError, ArchiveTooLargeError, extract_documents
from .metrics import PipelineMetrics
from .exporters import ResultExporter
from .result_cache import ResultCache
from .orchestrator import AnalysisOrchestrator, PipelineError

__all__ = [
    "MISCELLANEOUS",
    "BatchResult",
    "DocumentAnalysis",
    "ExtractedName",
    "ExtractionResult",
    "ParsedDocument",
    "PatternGroup",
    "FileNameTokenizer",
    "DuplicateDetector",
    "NormalizationRule",
    "PatternNormalizer",
    "PrefixExtractor",
    "PatternMatcher",
    "PatternClusterer",
    "FileNameAnalyzer",
    "CrossDocumentMerger",
    "AIAnalysisPayload",
    "AIPayloadError",
    "parse_ai_payload",
    "DocumentParseError",
    "DocumentParser",
    "ArchiveError",
    "ArchiveTooLargeError",
    "extract_documents",
    "PipelineMetrics",
    "ResultExporter",
    "ResultCache",
    "AnalysisOrchestrator",
    "PipelineError",
]
