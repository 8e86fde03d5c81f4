#!/usr/bin/env python
"""Inspect a document by extracting its text and listing recognized file names."""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import load_settings
from src.filescope.document_parser import DocumentParseError, DocumentParser
from src.filescope.logging_utils import configure_logging, get_logger
from src.filescope.pattern_normalizer import PatternNormalizer
from src.filescope.tokenizer import FileNameTokenizer


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Inspect extracted document text and tokens.")
    parser.add_argument("--input", type=Path, required=True, help="Path to the document to inspect.")
    parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Maximum number of recognized file names to print.",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    settings = load_settings()

    configure_logging(settings, force=True)
    logger = get_logger("inspect_document")

    try:
        parsed = DocumentParser(settings).parse_path(args.input)
    except DocumentParseError as exc:
        logger.error("Parsing failed: %s", exc)
        return 1

    lines = parsed.text.splitlines()
    logger.info(
        "Extracted %s characters over %s lines using %s (pages=%s).",
        len(parsed.text),
        len(lines),
        parsed.backend,
        parsed.page_count,
    )
    for line in lines[:3]:
        logger.info("Snippet: %s", line)

    names = FileNameTokenizer(settings).tokenize(parsed.text)
    normalizer = PatternNormalizer(settings)
    logger.info("Recognized %s distinct file names.", len(names))
    for item in names[: args.limit]:
        logger.info("line %s: %s -> %s", item.line, item.name, normalizer.normalize(item.name))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
