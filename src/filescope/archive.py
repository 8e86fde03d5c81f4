"""Pull supported documents out of uploaded ZIP archives for batch analysis."""

from __future__ import annotations

import io
import re
import zipfile
from typing import List, Optional, Tuple

from config import Settings
from .document_parser import document_type_of
from .logging_utils import get_logger

logger = get_logger(__name__)

MAX_COMPRESSION_RATIO = 100


class ArchiveError(ValueError):
    """Raised when an archive cannot be used as a batch source."""


class ArchiveTooLargeError(ArchiveError):
    """Raised when an archive or its extracted content exceeds the size limits."""


def safe_member_path(member_name: str) -> Optional[str]:
    """Normalize a ZIP member name, returning None for absolute or traversing paths."""
    if not member_name:
        return None
    normalized = member_name.replace("\\", "/")
    if normalized.startswith("/") or re.match(r"^[A-Za-z]:", normalized):
        return None

    parts = []
    for part in normalized.split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            return None
        parts.append(part)
    return "/".join(parts) or None


def extract_documents(
    data: bytes,
    settings: Settings,
    *,
    include_subfolders: bool = False,
) -> List[Tuple[str, bytes]]:
    """
    Extract supported documents from ZIP bytes.

    Args:
        data: Raw archive content.
        settings: Supplies the supported document types and size limits.
        include_subfolders: Also take documents from nested folders.

    Returns:
        ``(file_name, content)`` pairs in archive order, ready for ``process_batch``.
    """
    if len(data) > settings.max_zip_size:
        raise ArchiveTooLargeError(
            f"ZIP file exceeds the maximum allowed size of {settings.max_zip_size} bytes."
        )
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as exc:
        raise ArchiveError("The file is not a valid ZIP archive.") from exc

    documents: List[Tuple[str, bytes]] = []
    total_size = 0
    with archive:
        for entry in archive.infolist():
            if entry.is_dir():
                continue
            member = safe_member_path(entry.filename)
            if member is None:
                logger.warning("Skipped ZIP entry with unsafe path: %s", entry.filename)
                continue

            parts = member.split("/")
            if len(parts) > 1 and not include_subfolders:
                continue
            name = parts[-1]
            if name.startswith("."):
                continue
            if document_type_of(name) not in settings.supported_document_types:
                continue
            if entry.file_size and entry.file_size / max(entry.compress_size, 1) > MAX_COMPRESSION_RATIO:
                logger.warning("Skipped ZIP entry with suspicious compression ratio: %s", member)
                continue

            total_size += entry.file_size
            if total_size > settings.max_batch_size:
                raise ArchiveTooLargeError(
                    "Extracted documents exceed the maximum allowed batch size of "
                    f"{settings.max_batch_size} bytes."
                )
            if len(documents) >= settings.max_batch_files:
                raise ArchiveError(
                    f"Too many files. Maximum allowed is {settings.max_batch_files} files per batch."
                )
            documents.append((name, archive.read(entry)))

    if not documents:
        hint = (
            "The archive contains no supported files."
            if include_subfolders
            else "Try including subfolders if the documents are in nested directories."
        )
        raise ArchiveError(f"No supported documents found in the ZIP archive. {hint}")

    logger.info("Extracted %s documents from ZIP archive", len(documents))
    return documents
