"""Command-line interface entry point for FileScope document analysis."""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

from config import load_settings
from src.filescope.document_parser import document_type_of
from src.filescope.exporters import EXPORT_FORMATS, ResultExporter
from src.filescope.logging_utils import configure_logging, get_logger
from src.filescope.orchestrator import AnalysisOrchestrator, PipelineError
from src.filescope.pipeline import ExtractionResult


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="filescope",
        description="Extract file names from documents and group them by naming pattern.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override the configured log level (default comes from FILESCOPE_LOG_LEVEL).",
    )
    parser.add_argument("--show-settings", action="store_true", help="Print runtime settings and exit.")
    parser.add_argument(
        "-i",
        "--input",
        nargs="+",
        help="One or more PDF, DOCX or TXT documents or ZIP archives; several inputs are merged into one report.",
    )
    parser.add_argument("-o", "--output", help="Optional path for an exported report.")
    parser.add_argument(
        "--format",
        choices=EXPORT_FORMATS,
        default=None,
        help="Export format (defaults to the output suffix, then FILESCOPE_EXPORT_FORMAT).",
    )
    parser.add_argument(
        "--use-ai",
        action="store_true",
        help="Use the configured AI extractor, falling back to regex analysis.",
    )
    parser.add_argument(
        "--include-subfolders",
        action="store_true",
        help="Also analyze documents in nested folders of ZIP inputs.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = load_settings()

    if args.log_level:
        settings.log_level = args.log_level

    configure_logging(settings, force=True)
    logger = get_logger(__name__)
    logger.info("FileScope CLI ready.")

    if args.show_settings:
        logger.info("Active settings: %s", settings.model_dump())
        if not args.input:
            return 0

    if not args.input:
        logger.error("No input document provided. Use --input to specify one or more files.")
        return 1

    orchestrator = AnalysisOrchestrator(settings)
    paths = [Path(item) for item in args.input]

    try:
        if len(paths) == 1 and document_type_of(paths[0].name) != "zip":
            outcome = orchestrator.process_path(paths[0], use_ai=args.use_ai)
            if not outcome.success or outcome.analysis is None:
                logger.error("Could not analyze %s: %s", outcome.file_name, outcome.error)
                return 2
            result = outcome.analysis
            source = outcome.file_name
        else:
            batch = orchestrator.process_paths(
                paths, use_ai=args.use_ai, include_subfolders=args.include_subfolders
            )
            for failed in (item for item in batch.results if not item.success):
                logger.warning("Skipped %s: %s", failed.file_name, failed.error)
            if not batch.successful_files:
                logger.error("No documents could be analyzed.")
                return 2
            result = batch.combined
            source = ", ".join(result.source_files)
    except PipelineError as exc:
        logger.error("Pipeline failed: %s", exc)
        return 2

    _log_summary(logger, result)

    if args.output:
        exported = ResultExporter(settings).export(result, Path(args.output), args.format, source)
        logger.info("Report written to %s", exported)
    return 0


def _log_summary(logger, result: ExtractionResult) -> None:
    logger.info(
        "Total file names found: %s in %s pattern groups",
        result.total_found,
        len(result.patterns),
    )
    for group in result.patterns:
        logger.info("Pattern %s -> %s files", group.pattern, group.count)
    if result.duplicates:
        logger.info("Duplicates: %s", ", ".join(result.duplicates))


if __name__ == "__main__":
    sys.exit(main())
