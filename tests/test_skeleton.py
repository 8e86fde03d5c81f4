"""Sanity checks for FileScope configuration and logging."""

from __future__ import annotations

import logging

import pytest

from config import DEFAULT_FILE_EXTENSIONS, Settings, load_settings
from src.filescope.logging_utils import configure_logging, get_logger, stage_timer


def test_load_settings_respects_environment(tmp_path, monkeypatch):
    output_dir = tmp_path / "outputs"

    monkeypatch.setenv("FILESCOPE_OUTPUT_DIR", str(output_dir))
    monkeypatch.setenv("FILESCOPE_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("FILESCOPE_DEBUG", "true")
    monkeypatch.setenv("FILESCOPE_FILE_EXTENSIONS", ".PDF, docx")
    monkeypatch.setenv("FILESCOPE_MAX_NAME_LENGTH", "120")
    monkeypatch.setenv("FILESCOPE_SIMILARITY_THRESHOLD", "0.9")
    monkeypatch.setenv("FILESCOPE_MIN_GROUP_SIZE", "3")
    monkeypatch.setenv("FILESCOPE_COLLAPSE_VARIABLE_SEGMENTS", "false")
    monkeypatch.setenv("FILESCOPE_SUPPORTED_DOCUMENT_TYPES", "pdf,txt")
    monkeypatch.setenv("FILESCOPE_PDF_PARSE_RETRIES", "0")
    monkeypatch.setenv("FILESCOPE_MAX_FILE_SIZE", "2048")
    monkeypatch.setenv("FILESCOPE_MAX_BATCH_SIZE", "4096")
    monkeypatch.setenv("FILESCOPE_MAX_ZIP_SIZE", "8192")
    monkeypatch.setenv("FILESCOPE_MAX_BATCH_FILES", "5")
    monkeypatch.setenv("FILESCOPE_BATCH_WORKERS", "1")
    monkeypatch.setenv("FILESCOPE_CACHE_ENABLED", "no")
    monkeypatch.setenv("FILESCOPE_CACHE_TTL_SECONDS", "60")
    monkeypatch.setenv("FILESCOPE_CACHE_MAX_ENTRIES", "10")
    monkeypatch.setenv("FILESCOPE_AI_EXTRACTOR", "tests.fake_module:fake_extractor")
    monkeypatch.setenv("FILESCOPE_AI_MAX_CHARS", "500")
    monkeypatch.setenv("FILESCOPE_EXPORT_FORMAT", "csv")

    load_settings.cache_clear()
    try:
        settings = load_settings()
    finally:
        load_settings.cache_clear()

    assert settings.output_dir == output_dir
    assert settings.log_level == "DEBUG"
    assert settings.debug is True
    assert settings.file_extensions == ("pdf", "docx")
    assert settings.max_name_length == 120
    assert settings.similarity_threshold == 0.9
    assert settings.min_group_size == 3
    assert settings.collapse_variable_segments is False
    assert settings.supported_document_types == ("pdf", "txt")
    assert settings.pdf_parse_retries == 0
    assert settings.max_file_size == 2048
    assert settings.max_batch_size == 4096
    assert settings.max_zip_size == 8192
    assert settings.max_batch_files == 5
    assert settings.batch_workers == 1
    assert settings.cache_enabled is False
    assert settings.cache_ttl_seconds == 60
    assert settings.cache_max_entries == 10
    assert settings.ai_extractor == "tests.fake_module:fake_extractor"
    assert settings.ai_available is True
    assert settings.ai_max_chars == 500
    assert settings.export_format == "csv"

    # The output directory should be created automatically.
    assert output_dir.exists()


def test_load_settings_rejects_invalid_values(tmp_path, monkeypatch):
    monkeypatch.setenv("FILESCOPE_OUTPUT_DIR", str(tmp_path / "outputs"))
    monkeypatch.setenv("FILESCOPE_MAX_NAME_LENGTH", "lots")

    load_settings.cache_clear()
    try:
        with pytest.raises(ValueError):
            load_settings()
    finally:
        load_settings.cache_clear()


def test_default_settings():
    settings = Settings()

    assert settings.similarity_threshold == 0.85
    assert settings.min_group_size == 2
    assert "md" in settings.file_extensions
    assert len(DEFAULT_FILE_EXTENSIONS) == len(set(DEFAULT_FILE_EXTENSIONS))
    assert settings.ai_available is False


def test_compiled_pattern_is_cached():
    settings = Settings()

    assert settings.compiled_pattern("filename") is settings.compiled_pattern("filename")
    with pytest.raises(KeyError):
        settings.compiled_pattern("unknown")


def test_configure_logging_emit_debug(tmp_path):
    settings = Settings(output_dir=tmp_path / "outputs", log_level="DEBUG", debug=True)

    settings.ensure_directories()
    configure_logging(settings, force=True)

    logger = get_logger("filescope.test")
    logger.debug("debug message emitted")

    root_logger = logging.getLogger()
    assert root_logger.level == logging.DEBUG
    assert any(isinstance(handler, logging.StreamHandler) for handler in root_logger.handlers)


def test_stage_timer_accumulates():
    timings = {}

    with stage_timer(timings, "parsing"):
        pass
    with stage_timer(timings, "parsing"):
        pass

    assert set(timings) == {"parsing"}
    assert timings["parsing"] >= 0.0
