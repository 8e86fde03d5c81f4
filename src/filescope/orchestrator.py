"""High-level orchestrator wiring parsing, analysis, caching and batch merging."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import importlib
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from config import Settings, load_settings
from .ai_schema import AIPayloadError, parse_ai_payload
from .analyzer import FileNameAnalyzer
from .archive import ArchiveError, extract_documents
from .document_parser import DocumentParseError, DocumentParser, document_type_of
from .logging_utils import get_logger, stage_timer
from .merger import CrossDocumentMerger
from .metrics import PipelineMetrics
from .pipeline import BatchResult, DocumentAnalysis, ExtractionResult
from .result_cache import ResultCache

logger = get_logger(__name__)

AIExtractor = Callable[[str, str], Mapping[str, Any]]
TRUNCATION_NOTICE = "\n\n[Document truncated due to length...]"


class PipelineError(RuntimeError):
    """Top-level pipeline failure."""


class AnalysisOrchestrator:
    """Run the FileScope analysis pipeline on documents and batches."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        document_parser: Optional[DocumentParser] = None,
        analyzer: Optional[FileNameAnalyzer] = None,
        merger: Optional[CrossDocumentMerger] = None,
        cache: Optional[ResultCache] = None,
        metrics: Optional[PipelineMetrics] = None,
        ai_extractor: Optional[AIExtractor] = None,
    ):
        self.settings = settings or load_settings()

        self.document_parser = document_parser or DocumentParser(self.settings)
        self.analyzer = analyzer or FileNameAnalyzer(self.settings)
        self.merger = merger or CrossDocumentMerger()
        self.cache = cache or ResultCache(self.settings)
        self.metrics = metrics or PipelineMetrics()
        self.ai_extractor = ai_extractor or self._load_ai_extractor()

    @property
    def ai_available(self) -> bool:
        return self.ai_extractor is not None

    def analyze_text(self, text: str, file_type: str = "txt", *, use_ai: bool = False) -> ExtractionResult:
        """Analyze already-extracted text, preferring the AI extractor when requested."""
        if use_ai and self.ai_extractor is not None:
            ai_result = self._analyze_with_ai(text, file_type)
            if ai_result is not None:
                return ai_result
            self.metrics.record_ai_fallback()
        return self.analyzer.analyze(text)

    def process_path(self, path: Path, *, use_ai: bool = False) -> DocumentAnalysis:
        """Run the full pipeline on a document path."""
        path = path.resolve()
        if not path.exists():
            raise PipelineError(f"Document not found: {path}")
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise PipelineError(f"Unable to read {path}: {exc}") from exc
        return self.process_bytes(data, path.name, use_ai=use_ai)

    def process_bytes(self, data: bytes, filename: str, *, use_ai: bool = False) -> DocumentAnalysis:
        """
        Parse and analyze one uploaded document.

        Parse failures, including unsupported file types, are reported on the
        returned ``DocumentAnalysis``; unexpected failures raise ``PipelineError``.
        """
        stage_timings: Dict[str, float] = {}
        try:
            file_type = self.document_parser.check_type(filename)
        except DocumentParseError as exc:
            logger.warning("Rejected %s: %s", filename, exc)
            return self._failed(filename, document_type_of(filename) or "unknown", str(exc), stage_timings)

        ai_used = use_ai and self.ai_available
        cache_key = ResultCache.make_key(data, f"{'ai' if ai_used else 'regex'}:{file_type}")

        if self.settings.cache_enabled:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.info("Cache hit for %s", filename)
                self.metrics.record_document("cached", file_type)
                return self._rename(cached, filename)

        try:
            with stage_timer(stage_timings, "parsing"):
                parsed = self.document_parser.parse_bytes(data, filename)
        except DocumentParseError as exc:
            logger.warning("Could not parse %s: %s", filename, exc)
            return self._failed(filename, file_type, str(exc), stage_timings)

        if not parsed.text.strip():
            outcome = self._failed(
                filename,
                file_type,
                "The document appears to be empty or contains no extractable text.",
                stage_timings,
            )
            outcome.page_count = parsed.page_count
            return outcome

        try:
            with stage_timer(stage_timings, "analysis"):
                analysis = self.analyze_text(parsed.text, file_type, use_ai=use_ai)
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Analysis failed for %s", filename)
            self.metrics.record_document("error", file_type)
            raise PipelineError(str(exc)) from exc

        logger.info(
            "Analyzed %s: %s file names in %s groups",
            filename,
            analysis.total_found,
            len(analysis.patterns),
        )
        self.metrics.record_document("success", file_type)
        self.metrics.record_stages(stage_timings)
        outcome = DocumentAnalysis(
            file_name=filename,
            file_type=file_type,
            success=True,
            analysis=analysis,
            text_length=len(parsed.text),
            page_count=parsed.page_count,
            stage_durations=stage_timings,
        )
        if self.settings.cache_enabled:
            self.cache.set(cache_key, outcome)
        return outcome

    def process_batch(
        self,
        documents: Sequence[Tuple[str, bytes]],
        *,
        use_ai: bool = False,
    ) -> BatchResult:
        """Analyze ``(filename, data)`` pairs and merge successes in submission order."""
        if not documents:
            raise PipelineError("No files provided")
        if len(documents) > self.settings.max_batch_files:
            raise PipelineError(
                f"Too many files. Maximum allowed is {self.settings.max_batch_files} files per batch."
            )

        logger.info("Starting batch analysis of %s documents", len(documents))
        start = time.time()
        stage_timings: Dict[str, float] = {}

        with stage_timer(stage_timings, "documents"):
            workers = max(1, min(self.settings.batch_workers, len(documents)))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                results: List[DocumentAnalysis] = list(
                    executor.map(
                        lambda item: self._process_batch_item(item[0], item[1], use_ai),
                        documents,
                    )
                )

        with stage_timer(stage_timings, "merge"):
            combined = self.merger.merge(
                [(item.file_name, item.analysis) for item in results if item.success and item.analysis]
            )

        batch = BatchResult(results=results, combined=combined, stage_durations=stage_timings)
        self.metrics.record_batch()
        self.metrics.record_stages(stage_timings)
        logger.info(
            "Batch finished in %.2fs (%s ok, %s failed)",
            time.time() - start,
            batch.successful_files,
            batch.failed_files,
        )
        return batch

    def process_archive(
        self,
        data: bytes,
        *,
        include_subfolders: bool = False,
        use_ai: bool = False,
    ) -> BatchResult:
        """Analyze the supported documents inside ZIP bytes as one batch."""
        try:
            documents = extract_documents(data, self.settings, include_subfolders=include_subfolders)
        except ArchiveError as exc:
            raise PipelineError(str(exc)) from exc
        return self.process_batch(documents, use_ai=use_ai)

    def process_paths(
        self,
        paths: Sequence[Path],
        *,
        use_ai: bool = False,
        include_subfolders: bool = False,
    ) -> BatchResult:
        """Analyze document paths as one batch; ZIP archives contribute their documents."""
        documents: List[Tuple[str, bytes]] = []
        for path in paths:
            path = path.resolve()
            if not path.exists():
                raise PipelineError(f"Document not found: {path}")
            data = path.read_bytes()
            if document_type_of(path.name) == "zip":
                try:
                    documents.extend(
                        extract_documents(data, self.settings, include_subfolders=include_subfolders)
                    )
                except ArchiveError as exc:
                    raise PipelineError(f"{path.name}: {exc}") from exc
            else:
                documents.append((path.name, data))
        return self.process_batch(documents, use_ai=use_ai)

    def _process_batch_item(self, filename: str, data: bytes, use_ai: bool) -> DocumentAnalysis:
        try:
            return self.process_bytes(data, filename, use_ai=use_ai)
        except PipelineError as exc:
            return DocumentAnalysis(
                file_name=filename,
                file_type=document_type_of(filename) or "unknown",
                success=False,
                error=str(exc),
            )

    def _failed(
        self,
        filename: str,
        file_type: str,
        error: str,
        stage_timings: Dict[str, float],
    ) -> DocumentAnalysis:
        self.metrics.record_document("failed", file_type)
        return DocumentAnalysis(
            file_name=filename,
            file_type=file_type,
            success=False,
            error=error,
            stage_durations=stage_timings,
        )

    def _analyze_with_ai(self, text: str, file_type: str) -> Optional[ExtractionResult]:
        if len(text) > self.settings.ai_max_chars:
            text = text[: self.settings.ai_max_chars] + TRUNCATION_NOTICE
        try:
            payload = self.ai_extractor(text, file_type)
            if payload is None:
                return None
            return parse_ai_payload(payload)
        except AIPayloadError as exc:
            logger.warning("%s; falling back to regex analysis", exc)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("AI analysis failed (%s); falling back to regex analysis", exc)
        return None

    @staticmethod
    def _rename(cached: DocumentAnalysis, filename: str) -> DocumentAnalysis:
        return DocumentAnalysis(
            file_name=filename,
            file_type=cached.file_type,
            success=cached.success,
            analysis=cached.analysis,
            error=cached.error,
            text_length=cached.text_length,
            page_count=cached.page_count,
            stage_durations={"cache": 0.0},
        )

    def _load_ai_extractor(self) -> Optional[AIExtractor]:
        target = self.settings.ai_extractor
        if not target:
            return None
        try:
            module_name, func_name = target.rsplit(":", 1)
        except ValueError:
            raise PipelineError("AI extractor must be specified as 'module:function'.") from None

        module = importlib.import_module(module_name)
        callable_obj = getattr(module, func_name, None)
        if callable_obj is None:
            raise PipelineError(f"Function '{func_name}' not found in module '{module_name}'.")
        return callable_obj
