"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from slowquery.core.auth import verify_api_key
from slowquery.core.config import settings
from slowquery.core.error_handler import handle_analysis_error
from slowquery.core.models import (
    AnalyzeRequest,
    AnalyzeResponse,
    DiagnosticsResponse,
    DocumentChangeRequest,
    DocumentClosedResponse,
    DocumentOpenRequest,
    DocumentRef,
    Notification,
    RuleInfo,
)
from slowquery.core.monitoring import metrics
from slowquery.core.security import limiter, validate_document_text
from slowquery.services.analyzer.rules_engine import get_rules
from slowquery.services.pipeline import (
    analyze_text,
    detect_slow_queries,
    on_document_changed,
    on_document_opened,
    summarize_text,
)
from slowquery.services.workspace import Workspace, get_workspace

__version__ = "0.1.0"

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(f"Starting slow query detector with {len(get_rules())} rules...")
    yield
    logger.info("Shutting down slow query detector...")


app = FastAPI(
    title="Slow Query Detector API",
    description="Static pattern checks for SQL that tends to run slowly",
    version=__version__,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization", "X-API-Key"],
    max_age=3600,
)


def _diagnostics_response(workspace: Workspace, uri: str) -> DiagnosticsResponse:
    document = workspace.get_document(uri)
    return DiagnosticsResponse(
        uri=uri,
        language_id=document.language_id,
        version=document.version,
        diagnostics=workspace.diagnostics.get(uri),
    )


@app.get("/api/health")
async def health_check():
    """Health check endpoint with metrics."""
    return {
        "ok": True,
        "metrics": metrics.get_metrics(),
        "version": __version__,
    }


@app.get("/metrics")
async def get_prometheus_metrics():
    """Expose Prometheus metrics."""
    return Response(content=metrics.get_prometheus_data(), media_type="text/plain")


@app.get("/api/rules", response_model=list[RuleInfo])
async def list_rules():
    """List the rule catalog in evaluation order."""
    return [
        RuleInfo(code=rule.code, name=rule.name, pattern=rule.pattern.pattern, message=rule.message)
        for rule in get_rules()
    ]


@app.post("/api/analyze", response_model=AnalyzeResponse)
@limiter.limit(settings.rate_limit)
async def analyze(
    analyze_request: AnalyzeRequest,
    request: Request,
    _: bool = Security(verify_api_key),
):
    """Report every match of every rule with its exact span."""
    validate_document_text(analyze_request.text, settings.max_document_length)
    try:
        findings = analyze_text(analyze_request.text)
        return AnalyzeResponse(findings=findings, total=len(findings))
    except Exception as e:
        metrics.record_error("analyze")
        raise handle_analysis_error(e, "analyze endpoint")


@app.post("/api/summarize", response_model=Notification)
@limiter.limit(settings.rate_limit)
async def summarize(
    analyze_request: AnalyzeRequest,
    request: Request,
    _: bool = Security(verify_api_key),
):
    """Report at most one message per rule as a single notification."""
    validate_document_text(analyze_request.text, settings.max_document_length)
    try:
        return summarize_text(analyze_request.text)
    except Exception as e:
        metrics.record_error("summarize")
        raise handle_analysis_error(e, "summarize endpoint")


@app.post("/api/documents/open", response_model=DiagnosticsResponse)
@limiter.limit(settings.rate_limit)
async def open_document(
    open_request: DocumentOpenRequest,
    request: Request,
    workspace: Workspace = Depends(get_workspace),
    _: bool = Security(verify_api_key),
):
    """Open (or reopen) a document and publish its diagnostics."""
    validate_document_text(open_request.text, settings.max_document_length)
    try:
        on_document_opened(
            workspace,
            open_request.uri,
            open_request.language_id,
            open_request.text,
            activate=open_request.activate,
        )
        return _diagnostics_response(workspace, open_request.uri)
    except Exception as e:
        metrics.record_error("document_open")
        raise handle_analysis_error(e, "open_document")


@app.post("/api/documents/change", response_model=DiagnosticsResponse)
@limiter.limit(settings.rate_limit)
async def change_document(
    change_request: DocumentChangeRequest,
    request: Request,
    workspace: Workspace = Depends(get_workspace),
    _: bool = Security(verify_api_key),
):
    """Replace a document's text and its diagnostics."""
    validate_document_text(change_request.text, settings.max_document_length)
    try:
        on_document_changed(workspace, change_request.uri, change_request.text)
        return _diagnostics_response(workspace, change_request.uri)
    except Exception as e:
        raise handle_analysis_error(e, "change_document")


@app.post("/api/documents/focus", response_model=DiagnosticsResponse)
async def focus_document(
    ref: DocumentRef,
    workspace: Workspace = Depends(get_workspace),
    _: bool = Security(verify_api_key),
):
    """Make an open document the active one."""
    try:
        workspace.focus(ref.uri)
        return _diagnostics_response(workspace, ref.uri)
    except Exception as e:
        raise handle_analysis_error(e, "focus_document")


@app.post("/api/documents/close", response_model=DocumentClosedResponse)
async def close_document(
    ref: DocumentRef,
    workspace: Workspace = Depends(get_workspace),
    _: bool = Security(verify_api_key),
):
    """Close a document and drop its diagnostics."""
    try:
        workspace.close_document(ref.uri)
        return DocumentClosedResponse(uri=ref.uri)
    except Exception as e:
        raise handle_analysis_error(e, "close_document")


@app.get("/api/diagnostics", response_model=DiagnosticsResponse)
async def get_diagnostics(
    uri: str,
    workspace: Workspace = Depends(get_workspace),
    _: bool = Security(verify_api_key),
):
    """Current diagnostics for an open document."""
    try:
        return _diagnostics_response(workspace, uri)
    except Exception as e:
        raise handle_analysis_error(e, "get_diagnostics")


@app.post("/api/commands/detect-slow-queries", response_model=Notification)
async def run_detect_slow_queries(
    workspace: Workspace = Depends(get_workspace),
    _: bool = Security(verify_api_key),
):
    """
    On-demand check of the active document.

    Returns a warning notification listing the triggered rules, an info
    notification when nothing matched, or 409 when no document is active.
    """
    try:
        return detect_slow_queries(workspace)
    except Exception as e:
        raise handle_analysis_error(e, "detect-slow-queries command")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("slowquery.app:app", host="0.0.0.0", port=8000, reload=True)
