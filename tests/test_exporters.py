"""Tests for result export formats."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml
from openpyxl import load_workbook

from config import Settings
from src.filescope.exporters import ResultExporter, format_for_path
from src.filescope.pipeline import MISCELLANEOUS, ExtractedName, ExtractionResult, PatternGroup


def _result() -> ExtractionResult:
    return ExtractionResult(
        patterns=[
            PatternGroup(
                pattern="Invoice_XXX.pdf",
                files=[
                    ExtractedName("Invoice_001.pdf", "pdf", line=1),
                    ExtractedName("Invoice_002.pdf", "pdf", line=2),
                ],
                description="Invoices",
            ),
            PatternGroup(pattern=MISCELLANEOUS, files=[ExtractedName("readme.md", "md", line=3)]),
        ],
        duplicates=["invoice_002.pdf"],
        summary="Two invoices and a readme",
    )


def test_csv_lists_every_file_with_duplicate_flag():
    csv_text = ResultExporter().to_csv(_result())

    assert csv_text.split("\n") == [
        "Pattern,File Name,Extension,Is Duplicate",
        '"Invoice_XXX.pdf","Invoice_001.pdf","pdf","No"',
        '"Invoice_XXX.pdf","Invoice_002.pdf","pdf","Yes"',
        '"Miscellaneous","readme.md","md","No"',
    ]


def test_csv_escapes_embedded_quotes():
    result = ExtractionResult(
        patterns=[PatternGroup(pattern=MISCELLANEOUS, files=[ExtractedName('say "hi".txt', "txt")])],
        duplicates=[],
    )

    assert ResultExporter().to_csv(result).split("\n")[1] == '"Miscellaneous","say ""hi"".txt","txt","No"'


def test_json_report_carries_metadata_and_groups():
    report = json.loads(ResultExporter().to_json(_result(), source="index.pdf"))

    assert report["metadata"]["source"] == "index.pdf"
    assert report["metadata"]["total_files"] == 3
    assert report["metadata"]["pattern_groups"] == 2
    assert report["metadata"]["duplicates"] == 1
    assert [group["pattern"] for group in report["patterns"]] == ["Invoice_XXX.pdf", MISCELLANEOUS]
    assert report["duplicates"] == ["invoice_002.pdf"]


def test_yaml_report_matches_json_structure():
    exporter = ResultExporter()
    report = yaml.safe_load(exporter.to_yaml(_result(), source="index.pdf"))

    assert report["patterns"][0]["files"][0]["name"] == "Invoice_001.pdf"
    assert report["metadata"]["summary"] == "Two invoices and a readme"


def test_markdown_report_sections():
    text = ResultExporter().to_markdown(_result(), source="index.pdf")

    assert text.startswith("# FileScope Analysis Report")
    assert "**Source:** index.pdf" in text
    assert "## Summary" in text
    assert "### Invoice_XXX.pdf" in text
    assert "*Invoices*" in text
    assert "| Invoice_002.pdf | pdf | N/A | Yes |" in text
    assert "- invoice_002.pdf" in text


def test_excel_export_writes_expected_sheets(tmp_path):
    path = ResultExporter().export(_result(), tmp_path / "report.xlsx", source="index.pdf")

    workbook = load_workbook(path)
    assert workbook.sheetnames == ["Summary", "Patterns", "All Files", "Duplicates"]
    rows = list(workbook["Patterns"].iter_rows(values_only=True))
    assert rows[1] == ("Invoice_XXX.pdf", "Invoices", 2, "Invoice_001.pdf; Invoice_002.pdf")


def test_excel_skips_duplicates_sheet_when_none():
    result = _result()
    result.duplicates = []

    workbook = ResultExporter().to_excel(result)

    assert "Duplicates" not in workbook.sheetnames


def test_export_infers_format_from_suffix(tmp_path):
    path = ResultExporter().export(_result(), tmp_path / "nested" / "report.csv")

    assert path.read_text(encoding="utf-8").startswith("Pattern,File Name")


def test_export_uses_settings_default_for_unknown_suffix(tmp_path):
    exporter = ResultExporter(Settings(export_format="yaml"))

    path = exporter.export(_result(), tmp_path / "report.out")

    assert yaml.safe_load(path.read_text(encoding="utf-8"))["metadata"]["total_files"] == 3


def test_render_rejects_binary_or_unknown_formats():
    with pytest.raises(ValueError):
        ResultExporter().render(_result(), "excel")


@pytest.mark.parametrize(
    "name,expected",
    [
        ("out.csv", "csv"),
        ("out.YML", "yaml"),
        ("out.md", "markdown"),
        ("out.xlsx", "excel"),
        ("out.txt", "json"),
    ],
)
def test_format_for_path(name, expected):
    assert format_for_path(Path(name)) == expected
