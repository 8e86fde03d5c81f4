"""Serialize extraction results to CSV, JSON, YAML, Markdown and Excel."""

from __future__ import annotations

import csv
import io
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from openpyxl import Workbook
import yaml

from config import Settings
from .logging_utils import get_logger
from .pipeline import ExtractionResult

logger = get_logger(__name__)

EXPORT_FORMATS = ("csv", "json", "yaml", "markdown", "excel")
_SUFFIXES = {
    ".csv": "csv",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".md": "markdown",
    ".xlsx": "excel",
}
REPORT_TITLE = "FileScope Analysis Report"


def format_for_path(path: Path, default: str = "json") -> str:
    return _SUFFIXES.get(path.suffix.lower(), default)


class ResultExporter:
    """Render an ``ExtractionResult`` in the formats offered to users."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings

    def to_csv(self, result: ExtractionResult) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        buffer.write("Pattern,File Name,Extension,Is Duplicate\n")
        for group in result.patterns:
            for item in group.files:
                writer.writerow(
                    [
                        group.pattern,
                        item.name,
                        item.extension,
                        "Yes" if result.is_duplicate(item.name) else "No",
                    ]
                )
        return buffer.getvalue().rstrip("\n")

    def report_data(self, result: ExtractionResult, source: str) -> Dict[str, Any]:
        return {
            "metadata": {
                "exported_at": datetime.now(timezone.utc).isoformat(),
                "source": source,
                "total_files": result.total_found,
                "pattern_groups": len(result.patterns),
                "duplicates": len(result.duplicates),
                "ai_enhanced": result.ai_enhanced,
                "document_type": result.document_type,
                "summary": result.summary,
                "source_files": list(result.source_files),
            },
            "patterns": [group.to_dict() for group in result.patterns],
            "duplicates": list(result.duplicates),
        }

    def to_json(self, result: ExtractionResult, source: str = "") -> str:
        return json.dumps(self.report_data(result, source), indent=2)

    def to_yaml(self, result: ExtractionResult, source: str = "") -> str:
        return yaml.safe_dump(self.report_data(result, source), sort_keys=False)

    def to_markdown(self, result: ExtractionResult, source: str = "") -> str:
        lines = [
            f"# {REPORT_TITLE}",
            "",
            f"**Exported:** {datetime.now(timezone.utc).isoformat()}",
            f"**Source:** {source}",
            f"**Total Files Found:** {result.total_found}",
            f"**Pattern Groups:** {len(result.patterns)}",
            f"**Duplicates:** {len(result.duplicates)}",
            f"**AI Enhanced:** {'Yes' if result.ai_enhanced else 'No'}",
        ]
        if result.document_type:
            lines.append(f"**Document Type:** {result.document_type}")
        if result.summary:
            lines.extend(["", "## Summary", "", result.summary])

        lines.extend(["", "## Pattern Groups", ""])
        for group in result.patterns:
            lines.append(f"### {group.pattern}")
            if group.description:
                lines.append(f"*{group.description}*")
            lines.extend(
                [
                    f"**Count:** {group.count} files",
                    "",
                    "| File Name | Extension | Confidence | Duplicate |",
                    "|-----------|-----------|------------|-----------|",
                ]
            )
            for item in group.files:
                duplicate = "Yes" if result.is_duplicate(item.name) else "No"
                lines.append(
                    f"| {item.name} | {item.extension} | {item.confidence or 'N/A'} | {duplicate} |"
                )
            lines.append("")

        if result.duplicates:
            lines.extend(["## Duplicates", ""])
            lines.extend(f"- {name}" for name in result.duplicates)
            lines.append("")
        return "\n".join(lines)

    def to_excel(self, result: ExtractionResult, source: str = "") -> Workbook:
        workbook = Workbook()
        summary = workbook.active
        summary.title = "Summary"
        for row in (
            [REPORT_TITLE],
            ["Exported At", datetime.now(timezone.utc).isoformat()],
            ["Source", source],
            ["Total Files Found", result.total_found],
            ["Pattern Groups", len(result.patterns)],
            ["Duplicates", len(result.duplicates)],
            ["AI Enhanced", "Yes" if result.ai_enhanced else "No"],
            [],
            ["Document Type", result.document_type or "N/A"],
            ["Summary", result.summary or "N/A"],
        ):
            summary.append(row)

        patterns = workbook.create_sheet("Patterns")
        patterns.append(["Pattern", "Description", "File Count", "Files"])
        for group in result.patterns:
            patterns.append(
                [
                    group.pattern,
                    group.description or "",
                    group.count,
                    "; ".join(item.name for item in group.files),
                ]
            )

        files = workbook.create_sheet("All Files")
        files.append(["File Name", "Extension", "Pattern Group", "Confidence", "Is Duplicate", "Source"])
        for group in result.patterns:
            for item in group.files:
                files.append(
                    [
                        item.name,
                        item.extension,
                        group.pattern,
                        item.confidence or "",
                        "Yes" if result.is_duplicate(item.name) else "No",
                        source,
                    ]
                )

        if result.duplicates:
            duplicates = workbook.create_sheet("Duplicates")
            duplicates.append(["Duplicate File Names"])
            for name in result.duplicates:
                duplicates.append([name])
        return workbook

    def render(self, result: ExtractionResult, fmt: str, source: str = "") -> str:
        """Return a text rendering; Excel output is binary and only available via ``export``."""
        fmt = fmt.lower()
        if fmt == "csv":
            return self.to_csv(result)
        if fmt == "json":
            return self.to_json(result, source)
        if fmt == "yaml":
            return self.to_yaml(result, source)
        if fmt == "markdown":
            return self.to_markdown(result, source)
        raise ValueError(f"Unsupported text export format '{fmt}'")

    def export(
        self,
        result: ExtractionResult,
        output_path: Path,
        fmt: Optional[str] = None,
        source: str = "",
    ) -> Path:
        default = self.settings.export_format if self.settings else "json"
        fmt = (fmt or format_for_path(output_path, default)).lower()
        if fmt not in EXPORT_FORMATS:
            logger.warning("Unsupported export format '%s'; defaulting to JSON.", fmt)
            fmt = "json"

        output_path.parent.mkdir(parents=True, exist_ok=True)
        if fmt == "excel":
            self.to_excel(result, source).save(output_path)
        else:
            with output_path.open("w", encoding="utf-8", newline="") as handle:
                handle.write(self.render(result, fmt, source))

        logger.info("Exported %s results to %s", fmt, output_path)
        return output_path
