"""Schema contract for results produced by a pluggable AI extractor."""

from __future__ import annotations

from typing import Any, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .pipeline import ExtractedName, ExtractionResult, PatternGroup, order_groups


class AIPayloadError(ValueError):
    """Raised when an AI extractor returns a payload that violates the schema."""


class AIExtractedFile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1)
    extension: Optional[str] = None
    confidence: Literal["high", "medium", "low"]

    @model_validator(mode="after")
    def _default_extension(self) -> "AIExtractedFile":
        if not self.extension:
            self.extension = self.name.rsplit(".", 1)[-1].lower() if "." in self.name else ""
        else:
            self.extension = self.extension.lower().lstrip(".")
        return self


class AIPatternGroup(BaseModel):
    model_config = ConfigDict(extra="ignore")

    pattern: str
    description: Optional[str] = None
    files: List[AIExtractedFile] = Field(default_factory=list)


class AIAnalysisPayload(BaseModel):
    """Top-level JSON object an AI extractor must return."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    document_type: str = Field(default="Unknown document type", alias="documentType")
    summary: str = "Analysis complete"
    patterns: List[AIPatternGroup] = Field(default_factory=list)
    duplicates: List[str] = Field(default_factory=list)

    def to_extraction_result(self) -> ExtractionResult:
        patterns = [
            PatternGroup(
                pattern=group.pattern,
                description=group.description,
                files=[
                    ExtractedName(
                        name=item.name,
                        extension=item.extension or "",
                        confidence=item.confidence,
                    )
                    for item in group.files
                ],
            )
            for group in self.patterns
        ]
        return ExtractionResult(
            patterns=order_groups(patterns),
            duplicates=[name.lower() for name in self.duplicates],
            ai_enhanced=True,
            summary=self.summary,
            document_type=self.document_type,
        )


def parse_ai_payload(payload: Mapping[str, Any]) -> ExtractionResult:
    """Validate a raw AI payload and convert it into an ``ExtractionResult``."""
    try:
        return AIAnalysisPayload.model_validate(payload).to_extraction_result()
    except ValidationError as exc:
        raise AIPayloadError(f"AI extractor returned an invalid payload: {exc}") from exc
