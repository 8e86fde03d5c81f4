"""CLI tests for the FileScope analyzer."""

from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

from config import load_settings
from src.__main__ import main
from src.filescope.pipeline import DocumentAnalysis, ExtractedName, ExtractionResult, PatternGroup


class _StubOrchestrator:
    def __init__(self, settings):
        self.settings = settings

    def process_path(self, path: Path, *, use_ai: bool = False) -> DocumentAnalysis:
        result = ExtractionResult(
            patterns=[
                PatternGroup(
                    pattern="Invoice_XXX.pdf",
                    files=[ExtractedName("Invoice_001.pdf", "pdf"), ExtractedName("Invoice_002.pdf", "pdf")],
                )
            ],
            duplicates=[],
        )
        return DocumentAnalysis(file_name=path.name, file_type="pdf", success=True, analysis=result)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    monkeypatch.setenv("FILESCOPE_OUTPUT_DIR", str(tmp_path / "outputs"))
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


def test_cli_requires_input(capsys):
    exit_code = main([])

    assert exit_code == 1
    captured = capsys.readouterr()
    assert "No input document provided" in captured.out


def test_cli_runs_pipeline(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr("src.__main__.AnalysisOrchestrator", _StubOrchestrator)
    pdf = tmp_path / "index.pdf"
    pdf.write_text("dummy")

    exit_code = main(["--input", str(pdf)])

    assert exit_code == 0
    captured = capsys.readouterr()
    assert "Total file names found: 2" in captured.out
    assert "Pattern Invoice_XXX.pdf -> 2 files" in captured.out


def test_cli_reports_unparseable_document(monkeypatch, tmp_path, capsys):
    class _FailingParse(_StubOrchestrator):
        def process_path(self, path: Path, *, use_ai: bool = False) -> DocumentAnalysis:
            return DocumentAnalysis(file_name=path.name, file_type="pdf", success=False, error="bad header")

    monkeypatch.setattr("src.__main__.AnalysisOrchestrator", _FailingParse)
    pdf = tmp_path / "index.pdf"
    pdf.write_text("dummy")

    exit_code = main(["--input", str(pdf)])

    assert exit_code == 2
    assert "Could not analyze index.pdf: bad header" in capsys.readouterr().out


def test_cli_handles_pipeline_error(monkeypatch, tmp_path, capsys):
    from src import __main__

    class _FailingPipeline(_StubOrchestrator):
        def process_path(self, path: Path, *, use_ai: bool = False) -> DocumentAnalysis:
            raise __main__.PipelineError("boom")

    monkeypatch.setattr("src.__main__.AnalysisOrchestrator", _FailingPipeline)
    pdf = tmp_path / "index.pdf"
    pdf.write_text("dummy")

    exit_code = main(["--input", str(pdf)])

    assert exit_code == 2
    captured = capsys.readouterr()
    assert "Pipeline failed" in captured.out


def test_cli_merges_multiple_inputs_and_exports(tmp_path, capsys):
    first = tmp_path / "invoices.txt"
    first.write_text("Invoice_001.pdf\nInvoice_002.pdf\n", encoding="utf-8")
    second = tmp_path / "more.txt"
    second.write_text("Invoice_003.pdf\nInvoice_004.pdf\n", encoding="utf-8")
    report = tmp_path / "reports" / "combined.csv"

    exit_code = main(["--input", str(first), str(second), "--output", str(report)])

    assert exit_code == 0
    assert "Total file names found: 4" in capsys.readouterr().out
    lines = report.read_text(encoding="utf-8").split("\n")
    assert lines[0] == "Pattern,File Name,Extension,Is Duplicate"
    assert len(lines) == 5


def test_cli_format_flag_overrides_suffix(tmp_path):
    source = tmp_path / "invoices.txt"
    source.write_text("Invoice_001.pdf\nInvoice_002.pdf\n", encoding="utf-8")
    report = tmp_path / "report.txt"

    exit_code = main(["--input", str(source), "--output", str(report), "--format", "markdown"])

    assert exit_code == 0
    assert report.read_text(encoding="utf-8").startswith("# FileScope Analysis Report")


def test_cli_expands_zip_inputs(tmp_path, capsys):
    archive = tmp_path / "bundle.zip"
    with zipfile.ZipFile(archive, "w") as bundle:
        bundle.writestr("invoices.txt", "Invoice_001.pdf\nInvoice_002.pdf\n")
        bundle.writestr("nested/scans.txt", "Scan_001.png\nScan_002.png\n")

    exit_code = main(["--input", str(archive), "--include-subfolders"])

    assert exit_code == 0
    output = capsys.readouterr().out
    assert "Total file names found: 4" in output
    assert "Pattern Scan_XXX.png -> 2 files" in output
