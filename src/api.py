"""FastAPI application exposing the FileScope analysis pipeline."""

from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST

from config import Settings, load_settings
from src.filescope.archive import ArchiveError, ArchiveTooLargeError, extract_documents
from src.filescope.document_parser import document_type_of
from src.filescope.exporters import ResultExporter
from src.filescope.orchestrator import AnalysisOrchestrator, PipelineError

_MEDIA_TYPES = {
    "csv": "text/csv",
    "json": "application/json",
    "yaml": "application/x-yaml",
    "markdown": "text/markdown",
}
_FILE_SUFFIXES = {"csv": "csv", "json": "json", "yaml": "yaml", "markdown": "md"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = load_settings()
    settings.ensure_directories()
    return settings


@lru_cache(maxsize=1)
def get_orchestrator() -> AnalysisOrchestrator:
    return AnalysisOrchestrator(get_settings())


app = FastAPI(title="FileScope Document Analyzer", version="0.1.0")


@app.get("/healthz")
def health(settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    return {
        "status": "ok",
        "ai_available": settings.ai_available,
        "supported_document_types": list(settings.supported_document_types),
    }


@app.get("/analyze")
def ai_status(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)) -> Dict[str, Any]:
    return {"ai_available": orchestrator.ai_available}


@app.post("/analyze")
async def analyze_document(
    file: UploadFile = File(...),
    use_ai: bool = Form(False),
    export: Optional[str] = Form(None),
    settings: Settings = Depends(get_settings),
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
) -> Response:
    filename = file.filename or ""
    if document_type_of(filename) not in settings.supported_document_types:
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Please upload a PDF or Word document (.docx).",
        )
    if export is not None and export.lower() not in _MEDIA_TYPES:
        raise HTTPException(status_code=400, detail=f"Unsupported export format '{export}'.")

    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty.")
    if len(data) > settings.max_file_size:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds the maximum allowed size of {settings.max_file_size} bytes.",
        )

    try:
        outcome = orchestrator.process_bytes(data, filename, use_ai=use_ai)
    except PipelineError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    if not outcome.success or outcome.analysis is None:
        raise HTTPException(status_code=400, detail=outcome.error or "Failed to parse document")

    if export:
        fmt = export.lower()
        content = ResultExporter(settings).render(outcome.analysis, fmt, source=filename)
        return Response(
            content=content,
            media_type=_MEDIA_TYPES[fmt],
            headers={
                "Content-Disposition": f'attachment; filename="file-analysis.{_FILE_SUFFIXES[fmt]}"'
            },
        )

    payload = outcome.to_dict()
    payload.update(
        {
            "ai_available": orchestrator.ai_available,
            "ai_used": use_ai and orchestrator.ai_available,
        }
    )
    return JSONResponse(content=payload)


@app.post("/analyze-batch")
async def analyze_batch(
    files: List[UploadFile] = File(...),
    use_ai: bool = Form(False),
    settings: Settings = Depends(get_settings),
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    if len(files) > settings.max_batch_files:
        raise HTTPException(
            status_code=400,
            detail=f"Too many files. Maximum allowed is {settings.max_batch_files} files per batch.",
        )

    documents = [(upload.filename or "upload", await upload.read()) for upload in files]
    total_size = sum(len(data) for _, data in documents)
    if total_size > settings.max_batch_size:
        raise HTTPException(
            status_code=413,
            detail=f"Total file size exceeds the maximum allowed limit of {settings.max_batch_size} bytes.",
        )

    try:
        batch = orchestrator.process_batch(documents, use_ai=use_ai)
    except PipelineError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    payload = batch.to_dict()
    payload.update(
        {
            "ai_available": orchestrator.ai_available,
            "ai_used": use_ai and orchestrator.ai_available,
        }
    )
    return JSONResponse(content=payload)


@app.post("/extract-zip")
async def analyze_archive(
    file: UploadFile = File(...),
    include_subfolders: bool = Form(False),
    use_ai: bool = Form(False),
    settings: Settings = Depends(get_settings),
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    filename = file.filename or ""
    if document_type_of(filename) != "zip":
        raise HTTPException(status_code=400, detail="File must be a ZIP archive.")

    data = await file.read()
    try:
        documents = extract_documents(data, settings, include_subfolders=include_subfolders)
    except ArchiveTooLargeError as exc:
        raise HTTPException(status_code=413, detail=str(exc)) from exc
    except ArchiveError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        batch = orchestrator.process_batch(documents, use_ai=use_ai)
    except PipelineError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    payload = batch.to_dict()
    payload.update(
        {
            "archive": filename,
            "extracted_files": [name for name, _ in documents],
            "ai_available": orchestrator.ai_available,
            "ai_used": use_ai and orchestrator.ai_available,
        }
    )
    return JSONResponse(content=payload)


@app.get("/metrics")
def metrics(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)) -> Dict[str, Any]:
    return {
        "metrics": orchestrator.metrics.summary(),
        "cache": orchestrator.cache.stats(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/metrics/prometheus")
def prometheus_metrics(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)) -> Response:
    return Response(content=orchestrator.metrics.render_latest(), media_type=CONTENT_TYPE_LATEST)
