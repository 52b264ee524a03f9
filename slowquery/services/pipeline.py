"""Host-side operations: on-demand command and continuous document analysis."""

import logging
import time

from slowquery.core.error_handler import NoActiveDocumentError, log_analysis_event
from slowquery.core.models import Diagnostic, Finding, Notification
from slowquery.core.monitoring import metrics, monitor_function, track_execution_time
from slowquery.services.analyzer.rules_engine import RULES, analyze, format_summary, summarize
from slowquery.services.workspace import TextDocument, Workspace, report_diagnostics

logger = logging.getLogger(__name__)

_RULE_NAMES = {rule.message: rule.name for rule in RULES}


@monitor_function("analyze_text")
def analyze_text(text: str) -> list[Finding]:
    """Detailed mode over raw text, with timing and metrics."""
    start_time = time.perf_counter()
    findings = analyze(text)
    metrics.record_analysis(
        time.perf_counter() - start_time, "detailed", [finding.rule for finding in findings]
    )
    return findings


@monitor_function("summarize_text")
def summarize_text(text: str) -> Notification:
    """Summary mode over raw text, rendered as a single notification."""
    start_time = time.perf_counter()
    issues = summarize(text)
    metrics.record_analysis(
        time.perf_counter() - start_time, "summary", [_RULE_NAMES[message] for message in issues]
    )

    if issues:
        return Notification(level="warning", message=format_summary(issues), issues=issues)
    return Notification(level="info", message=format_summary(issues), issues=[])


def detect_slow_queries(workspace: Workspace) -> Notification:
    """
    On-demand check of the active document.

    Runs whatever the language id of the focused document is.

    Raises:
        NoActiveDocumentError: If no document is active
    """
    document = workspace.active_document
    if document is None:
        raise NoActiveDocumentError()

    notification = summarize_text(document.text)
    log_analysis_event(
        "command_run",
        {"uri": document.uri, "version": document.version, "issues": len(notification.issues)},
    )
    return notification


def _refresh(workspace: Workspace, document: TextDocument) -> list[Diagnostic]:
    if not document.is_sql():
        # The URI may have been SQL before a reopen
        workspace.diagnostics.delete(document.uri)
        metrics.record_skip()
        return []

    start_time = time.perf_counter()
    with track_execution_time(f"report_diagnostics[{document.uri}]"):
        diagnostics = report_diagnostics(document, workspace.diagnostics)
    metrics.record_analysis(
        time.perf_counter() - start_time, "detailed", [d.rule for d in diagnostics]
    )
    return diagnostics


def on_document_opened(
    workspace: Workspace, uri: str, language_id: str, text: str, activate: bool = True
) -> list[Diagnostic]:
    """Register an opened document and publish its diagnostics."""
    document = workspace.open_document(uri, language_id, text, activate=activate)
    diagnostics = _refresh(workspace, document)
    log_analysis_event(
        "document_opened",
        {"uri": uri, "language_id": language_id, "diagnostics": len(diagnostics)},
    )
    return diagnostics


def on_document_changed(workspace: Workspace, uri: str, text: str) -> list[Diagnostic]:
    """Apply a full-text change and replace the document's diagnostics."""
    document = workspace.change_document(uri, text)
    diagnostics = _refresh(workspace, document)
    logger.debug(f"{uri} v{document.version}: {len(diagnostics)} diagnostics")
    return diagnostics
