"""Plain-text extraction from uploaded PDF, DOCX and TXT documents."""

from __future__ import annotations

import io
import time
from pathlib import Path
from typing import List, Optional

import fitz  # PyMuPDF
from docx import Document
from PyPDF2 import PdfReader

from config import Settings
from .logging_utils import get_logger
from .pipeline import ParsedDocument

logger = get_logger(__name__)

_PDF_MAGIC = b"%PDF"
_ZIP_MAGIC = b"PK"
_NON_RETRYABLE_MARKERS = ("password", "encrypted", "invalid pdf")
RETRY_DELAY_SECONDS = 0.1


class DocumentParseError(RuntimeError):
    """Raised when a document's text cannot be extracted."""


def document_type_of(filename: str) -> str:
    return filename.lower().rsplit(".", 1)[-1] if "." in filename else ""


class DocumentParser:
    """Recover newline-separated text from supported document formats."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def check_type(self, filename: str) -> str:
        """Return the document type of ``filename`` or raise if it cannot be parsed."""
        file_type = document_type_of(filename)
        if file_type == "doc":
            raise DocumentParseError(
                "Legacy .doc files are not supported. Please convert to .docx format."
            )
        if file_type not in self.settings.supported_document_types:
            supported = ", ".join(f".{ext}" for ext in self.settings.supported_document_types)
            raise DocumentParseError(
                f"Unsupported file type: .{file_type}. Supported formats: {supported}"
            )
        return file_type

    def parse_path(self, path: Path) -> ParsedDocument:
        path = path.resolve()
        if not path.exists():
            raise DocumentParseError(f"Document not found: {path}")
        return self.parse_bytes(path.read_bytes(), path.name)

    def parse_bytes(self, data: bytes, filename: str) -> ParsedDocument:
        """
        Extract text from document bytes.

        Args:
            data: Raw file content.
            filename: Original file name; its extension selects the parser.

        Returns:
            ParsedDocument with the merged text of every page.
        """
        file_type = self.check_type(filename)
        if not data:
            raise DocumentParseError(f"Empty or invalid {file_type.upper()} document provided")

        if file_type == "pdf":
            parsed = self._parse_pdf(data, filename)
        elif file_type == "docx":
            parsed = self._parse_docx(data, filename)
        else:
            parsed = ParsedDocument(
                file_name=filename,
                file_type=file_type,
                text=data.decode("utf-8", errors="replace"),
                backend="text",
            )
        logger.info(
            "Parsed %s with %s (%s characters)", filename, parsed.backend, len(parsed.text)
        )
        return parsed

    def _parse_pdf(self, data: bytes, filename: str) -> ParsedDocument:
        if not data.startswith(_PDF_MAGIC):
            raise DocumentParseError(
                "File does not appear to be a valid PDF (missing PDF header)"
            )

        last_error: Optional[Exception] = None
        for attempt in range(self.settings.pdf_parse_retries + 1):
            try:
                return self._parse_with_pymupdf(data, filename)
            except DocumentParseError:
                raise
            except Exception as exc:  # pylint: disable=broad-except
                last_error = exc
                logger.debug("PyMuPDF attempt %s failed for %s: %s", attempt + 1, filename, exc)
                if any(marker in str(exc).lower() for marker in _NON_RETRYABLE_MARKERS):
                    break
                if attempt < self.settings.pdf_parse_retries:
                    time.sleep(RETRY_DELAY_SECONDS)

        logger.warning("PyMuPDF text extraction failed (%s). Falling back to PyPDF2.", last_error)
        try:
            return self._parse_with_pypdf2(data, filename)
        except DocumentParseError:
            raise
        except Exception as fallback_error:  # pylint: disable=broad-except
            raise DocumentParseError(_friendly_pdf_error(fallback_error)) from fallback_error

    def _parse_with_pymupdf(self, data: bytes, filename: str) -> ParsedDocument:
        with fitz.open(stream=data, filetype="pdf") as document:
            if document.needs_pass:
                raise DocumentParseError(
                    "PDF is password-protected or encrypted. Please provide an unprotected PDF."
                )
            pages = [document.load_page(index).get_text("text") for index in range(len(document))]
            return ParsedDocument(
                file_name=filename,
                file_type="pdf",
                text="\n".join(pages),
                page_count=len(pages),
                backend="pymupdf",
            )

    def _parse_with_pypdf2(self, data: bytes, filename: str) -> ParsedDocument:
        reader = PdfReader(io.BytesIO(data))
        if reader.is_encrypted:
            raise DocumentParseError(
                "PDF is password-protected or encrypted. Please provide an unprotected PDF."
            )
        pages = [page.extract_text() or "" for page in reader.pages]
        return ParsedDocument(
            file_name=filename,
            file_type="pdf",
            text="\n".join(pages),
            page_count=len(pages),
            backend="pypdf2",
        )

    def _parse_docx(self, data: bytes, filename: str) -> ParsedDocument:
        if not data.startswith(_ZIP_MAGIC):
            raise DocumentParseError(
                "File does not appear to be a valid Word document (.docx). "
                "Note: .doc files are not supported, only .docx."
            )
        try:
            document = Document(io.BytesIO(data))
        except Exception as exc:  # pylint: disable=broad-except
            logger.error("Word parsing error for %s: %s", filename, exc)
            raise DocumentParseError("The Word document appears to be corrupted or invalid.") from exc

        lines: List[str] = [paragraph.text for paragraph in document.paragraphs]
        for table in document.tables:
            for row in table.rows:
                for cell in row.cells:
                    lines.append(cell.text)
        return ParsedDocument(
            file_name=filename,
            file_type="docx",
            text="\n".join(lines),
            backend="python-docx",
        )


def _friendly_pdf_error(error: Exception) -> str:
    message = str(error) or "Failed to parse PDF"
    lowered = message.lower()
    if "password" in lowered or "encrypted" in lowered:
        return "PDF is password-protected or encrypted. Please provide an unprotected PDF."
    return f"The file appears to be corrupted or is not a valid PDF: {message}"
