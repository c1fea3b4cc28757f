"""
FastAPI entrypoint for the Analyzer service.

This module defines the public HTTP interface for source quality analysis.
It accepts uploaded source files (markup, stylesheets, scripts) plus the
category toggles, invokes the coordinator, and returns a QualityReport.

The application is stateless: nothing is persisted. Scan history and
project records belong to the caller.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Coroutine, List, Set
from uuid import uuid4

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.responses import Response

from analyzer.app.config import AnalyzerConfig
from analyzer.app.coordinator.coordinator import AnalysisCoordinator, AnalysisError
from analyzer.app.coordinator.sources import UploadSourceFile
from analyzer.app.schemas.analysis import ScanOptions
from analyzer.app.schemas.report import QualityReport

# Events / streaming
from analyzer.app.events import MemoryQueueEventEmitter

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Presentation helpers (presentation-only)
# ---------------------------------------------------------------------------

def pretty_json(data: Any) -> str:
    """
    Pretty-print JSON for human-readable output.
    """
    return json.dumps(
        data,
        ensure_ascii=False,
        allow_nan=False,
        indent=2,
        separators=(", ", ": "),
    )


class PrettyJSONResponse(Response):
    """
    Pretty-printed JSON response for human-readable console output.
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:
        return pretty_json(content).encode("utf-8")


# ---------------------------------------------------------------------------
# Application setup
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Analyzer Service",
    description="Rule-based quality analysis for markup, stylesheet and script sources",
    version="0.1.0",
)

# In-flight streaming analyses, each removed once done
_background_tasks: Set["asyncio.Task[None]"] = set()


def spawn_background(coro: Coroutine[Any, Any, None]) -> "asyncio.Task[None]":
    task = asyncio.create_task(coro)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


# ---------------------------------------------------------------------------
# Startup / Shutdown
# ---------------------------------------------------------------------------

@app.on_event("startup")
def startup_event() -> None:
    """
    Application startup hook.

    Configuration is loaded once and treated as immutable for the lifetime
    of the process. The analysis cache and timing registry are owned by
    the coordinator built here.
    """
    config = AnalyzerConfig.from_env()

    app.state.config = config
    app.state.coordinator = AnalysisCoordinator.from_config(config)


# ---------------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------------

async def _accept_uploads(
    files: List[UploadFile],
    config: AnalyzerConfig,
) -> List[UploadSourceFile]:
    """
    Enforce hard resource limits and wrap uploads as source files.

    Decoding happens later, inside the coordinator, so that an
    undecodable file is handled by the file error policy.
    """
    if not files:
        raise HTTPException(
            status_code=400,
            detail="At least one file is required",
        )

    if len(files) > config.MAX_FILES_PER_SCAN:
        raise HTTPException(
            status_code=413,
            detail=(
                f"Too many files: at most {config.MAX_FILES_PER_SCAN} "
                "are accepted per request"
            ),
        )

    max_size_bytes = config.MAX_FILE_SIZE_MB * 1024 * 1024
    sources: List[UploadSourceFile] = []

    for upload in files:
        try:
            raw = await upload.read()
        except Exception as exc:
            raise HTTPException(
                status_code=400,
                detail=f"Failed to read uploaded file {upload.filename}",
            ) from exc

        if len(raw) > max_size_bytes:
            raise HTTPException(
                status_code=413,
                detail=(
                    f"{upload.filename} exceeds maximum allowed size of "
                    f"{config.MAX_FILE_SIZE_MB} MB"
                ),
            )

        sources.append(UploadSourceFile(upload.filename or "untitled", raw))

    return sources


def _scan_options(
    check_accessibility: bool,
    check_security: bool,
    check_performance: bool,
    check_seo: bool,
    check_structure: bool,
    check_i18n: bool,
) -> ScanOptions:
    return ScanOptions(
        check_accessibility=check_accessibility,
        check_security=check_security,
        check_performance=check_performance,
        check_seo=check_seo,
        check_structure=check_structure,
        check_i18n=check_i18n,
    )


# ---------------------------------------------------------------------------
# API Routes
# ---------------------------------------------------------------------------

@app.post(
    "/analyze",
    response_model=QualityReport,
    response_class=PrettyJSONResponse,
    summary="Analyze source files",
)
async def analyze_files(
    files: List[UploadFile] = File(..., description="Source files to analyze"),
    check_accessibility: bool = Form(True),
    check_security: bool = Form(True),
    check_performance: bool = Form(True),
    check_seo: bool = Form(True),
    check_structure: bool = Form(True),
    check_i18n: bool = Form(True),
) -> QualityReport:
    """
    Analyze uploaded files and return the prioritized quality report.
    """
    config: AnalyzerConfig = app.state.config
    sources = await _accept_uploads(files, config)
    options = _scan_options(
        check_accessibility,
        check_security,
        check_performance,
        check_seo,
        check_structure,
        check_i18n,
    )

    coordinator: AnalysisCoordinator = app.state.coordinator

    try:
        return await coordinator.run_report(
            sources,
            options,
            analysis_id=str(uuid4()),
        )
    except AnalysisError as exc:
        raise HTTPException(
            status_code=422,
            detail={"file": exc.file, "error": str(exc.cause)},
        ) from exc


# ---------------------------------------------------------------------------
# Streaming Analysis (SSE)
# ---------------------------------------------------------------------------

@app.post(
    "/analyze/stream",
    summary="Analyze source files (streaming progress)",
)
async def analyze_files_stream(
    files: List[UploadFile] = File(..., description="Source files to analyze"),
    check_accessibility: bool = Form(True),
    check_security: bool = Form(True),
    check_performance: bool = Form(True),
    check_seo: bool = Form(True),
    check_structure: bool = Form(True),
    check_i18n: bool = Form(True),
):
    """
    Analyze while streaming progress events.

    This endpoint is observational only:
    - Client disconnects do NOT cancel the analysis
    - Events do NOT influence execution
    - Final ANALYSIS_COMPLETED event contains the QualityReport
    """
    config: AnalyzerConfig = app.state.config
    sources = await _accept_uploads(files, config)
    options = _scan_options(
        check_accessibility,
        check_security,
        check_performance,
        check_seo,
        check_structure,
        check_i18n,
    )

    coordinator: AnalysisCoordinator = app.state.coordinator
    analysis_id = str(uuid4())
    emitter = MemoryQueueEventEmitter()

    # --------------------------------------------------------------
    # Background analysis execution
    # --------------------------------------------------------------
    async def run_analysis_task() -> None:
        try:
            await coordinator.run_report(
                sources,
                options,
                analysis_id=analysis_id,
                emitter=emitter,
            )
        except Exception:
            # Coordinator already emitted ANALYSIS_FAILED
            logger.warning("Streaming analysis %s failed", analysis_id, exc_info=True)

    spawn_background(run_analysis_task())

    # --------------------------------------------------------------
    # SSE event stream
    # --------------------------------------------------------------
    async def event_stream():
        try:
            async for event in emitter.stream():
                yield event.to_sse_payload()
        except asyncio.CancelledError:
            # Client disconnected; analysis continues
            pass

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )


# ---------------------------------------------------------------------------
# Health Check
# ---------------------------------------------------------------------------

@app.get(
    "/health",
    summary="Service health check",
)
def health_check() -> JSONResponse:
    """Simple health check endpoint."""
    return JSONResponse(
        content={
            "status": "ok",
            "service": "analyzer",
        }
    )
