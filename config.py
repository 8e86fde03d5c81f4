"""Project-level configuration helpers for the FileScope analysis pipeline."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
import re
from typing import Any, Dict, Optional, Pattern

from pydantic import BaseModel, Field, PrivateAttr, ValidationError


EXTENSION_CATEGORIES: Dict[str, tuple[str, ...]] = {
    "documents": ("pdf", "docx", "doc", "rtf", "txt", "odt", "md"),
    "spreadsheets": ("xlsx", "xls", "csv", "ods"),
    "presentations": ("pptx", "ppt", "odp"),
    "images": ("jpg", "jpeg", "png", "gif", "bmp", "tiff", "tif", "webp", "svg"),
    "archives": ("zip", "rar", "7z", "tar", "gz"),
    "audio": ("mp3", "wav", "flac", "aac", "ogg", "m4a"),
    "video": ("mp4", "avi", "mov", "mkv", "wmv", "flv"),
    "data": ("xml", "json", "yaml", "yml", "html", "htm"),
    "email": ("eml", "msg", "pst"),
}

DEFAULT_FILE_EXTENSIONS: tuple[str, ...] = tuple(
    ext for group in EXTENSION_CATEGORIES.values() for ext in group
)

_LEADING_BOUNDARY = r"""(?:^|[\s"'(<\[{,;:])"""
_TRAILING_BOUNDARY = r"""(?=[\s"'>)\]},;:]|$)"""


class Settings(BaseModel):
    """Runtime settings loaded from environment variables or defaults."""

    output_dir: Path = Field(default_factory=lambda: Path("outputs"))
    log_level: str = "INFO"
    debug: bool = False
    file_extensions: tuple[str, ...] = DEFAULT_FILE_EXTENSIONS
    max_name_length: int = 200
    similarity_threshold: float = 0.85
    min_group_size: int = 2
    collapse_variable_segments: bool = True
    supported_document_types: tuple[str, ...] = ("pdf", "docx", "txt")
    pdf_parse_retries: int = 2
    max_file_size: int = 10 * 1024 * 1024
    max_batch_size: int = 10 * 1024 * 1024
    max_zip_size: int = 50 * 1024 * 1024
    max_batch_files: int = 100
    batch_workers: int = 4
    cache_enabled: bool = True
    cache_ttl_seconds: int = 3600
    cache_max_entries: int = 1000
    ai_extractor: Optional[str] = None
    ai_max_chars: int = 100_000
    export_format: str = "json"
    _compiled_patterns: Dict[str, Pattern[str]] = PrivateAttr(default_factory=dict)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings by reading environment variables with FileScope-specific prefixes."""
        defaults = cls()
        env_overrides: Dict[str, Any] = {
            "output_dir": Path(os.getenv("FILESCOPE_OUTPUT_DIR", str(defaults.output_dir))),
            "log_level": os.getenv("FILESCOPE_LOG_LEVEL", defaults.log_level),
            "debug": _coerce_bool(os.getenv("FILESCOPE_DEBUG", str(defaults.debug))),
            "file_extensions": _coerce_tuple(
                os.getenv("FILESCOPE_FILE_EXTENSIONS"), defaults.file_extensions
            ),
            "max_name_length": int(
                os.getenv("FILESCOPE_MAX_NAME_LENGTH", defaults.max_name_length)
            ),
            "similarity_threshold": float(
                os.getenv("FILESCOPE_SIMILARITY_THRESHOLD", defaults.similarity_threshold)
            ),
            "min_group_size": int(os.getenv("FILESCOPE_MIN_GROUP_SIZE", defaults.min_group_size)),
            "collapse_variable_segments": _coerce_bool(
                os.getenv(
                    "FILESCOPE_COLLAPSE_VARIABLE_SEGMENTS", str(defaults.collapse_variable_segments)
                )
            ),
            "supported_document_types": _coerce_tuple(
                os.getenv("FILESCOPE_SUPPORTED_DOCUMENT_TYPES"), defaults.supported_document_types
            ),
            "pdf_parse_retries": int(
                os.getenv("FILESCOPE_PDF_PARSE_RETRIES", defaults.pdf_parse_retries)
            ),
            "max_file_size": int(os.getenv("FILESCOPE_MAX_FILE_SIZE", defaults.max_file_size)),
            "max_batch_size": int(os.getenv("FILESCOPE_MAX_BATCH_SIZE", defaults.max_batch_size)),
            "max_zip_size": int(os.getenv("FILESCOPE_MAX_ZIP_SIZE", defaults.max_zip_size)),
            "max_batch_files": int(
                os.getenv("FILESCOPE_MAX_BATCH_FILES", defaults.max_batch_files)
            ),
            "batch_workers": int(os.getenv("FILESCOPE_BATCH_WORKERS", defaults.batch_workers)),
            "cache_enabled": _coerce_bool(
                os.getenv("FILESCOPE_CACHE_ENABLED", str(defaults.cache_enabled))
            ),
            "cache_ttl_seconds": int(
                os.getenv("FILESCOPE_CACHE_TTL_SECONDS", defaults.cache_ttl_seconds)
            ),
            "cache_max_entries": int(
                os.getenv("FILESCOPE_CACHE_MAX_ENTRIES", defaults.cache_max_entries)
            ),
            "ai_extractor": os.getenv("FILESCOPE_AI_EXTRACTOR", defaults.ai_extractor),
            "ai_max_chars": int(os.getenv("FILESCOPE_AI_MAX_CHARS", defaults.ai_max_chars)),
            "export_format": os.getenv("FILESCOPE_EXPORT_FORMAT", defaults.export_format),
        }
        return cls(**env_overrides)

    def ensure_directories(self) -> None:
        """Create directories that the pipeline expects to exist."""
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @property
    def ai_available(self) -> bool:
        return bool(self.ai_extractor and self.ai_extractor.strip())

    def compiled_pattern(self, key: str) -> Pattern[str]:
        """Return a compiled regex pattern, caching results for reuse."""
        builders = {
            "filename": self._filename_pattern,
        }
        if key not in builders:
            raise KeyError(f"Unknown regex key: {key}")
        if key not in self._compiled_patterns:
            self._compiled_patterns[key] = re.compile(builders[key](), flags=re.IGNORECASE)
        return self._compiled_patterns[key]

    def _filename_pattern(self) -> str:
        # Longest extensions first so "docx" is tried before "doc".
        extensions = sorted({ext.lower() for ext in self.file_extensions}, key=lambda e: (-len(e), e))
        ext_pattern = "|".join(re.escape(ext) for ext in extensions)
        body = rf"[A-Za-z0-9_][A-Za-z0-9_\-. ()\[\]]{{0,{self.max_name_length}}}"
        return rf"{_LEADING_BOUNDARY}({body}\.(?:{ext_pattern})){_TRAILING_BOUNDARY}"


def _coerce_bool(value: str) -> bool:
    if isinstance(value, bool):
        return value
    return value.lower() in {"1", "true", "yes", "y"}


def _coerce_tuple(value: Optional[str], default: tuple[str, ...]) -> tuple[str, ...]:
    if not value:
        return default
    items = tuple(item.strip().lower().lstrip(".") for item in value.split(",") if item.strip())
    return items or default


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Return cached settings, raising a helpful error if validation fails."""
    try:
        settings = Settings.from_env()
        settings.ensure_directories()
        return settings
    except ValidationError as exc:
        raise RuntimeError(f"Invalid application configuration: {exc}") from exc
