"""Centralized error handling and logging."""

import logging
from typing import Optional

from fastapi import HTTPException

from slowquery.core.security import sanitize_error_message

logger = logging.getLogger(__name__)


class AnalysisError(Exception):
    """Base exception for host-side analysis errors."""

    pass


class DocumentNotFoundError(AnalysisError):
    """The referenced document is not open in the workspace."""

    def __init__(self, uri: str):
        super().__init__(f"Document not open: {uri}")
        self.uri = uri


class NoActiveDocumentError(AnalysisError):
    """An on-demand check was requested while no document is active."""

    def __init__(self, message: str = "No active editor detected."):
        super().__init__(message)


def handle_analysis_error(error: Exception, context: Optional[str] = None) -> HTTPException:
    """
    Handle analysis errors and return appropriate HTTP response.

    Args:
        error: The exception that occurred
        context: Additional context about where the error occurred

    Returns:
        HTTPException with sanitized error message
    """
    if isinstance(error, HTTPException):
        return error

    error_context = f" in {context}" if context else ""

    if isinstance(error, DocumentNotFoundError):
        status_code = 404
    elif isinstance(error, NoActiveDocumentError):
        status_code = 409
    else:
        status_code = 500

    if status_code == 500:
        logger.error(f"Analysis error{error_context}: {error}", exc_info=True)
    else:
        logger.info(f"Analysis request rejected{error_context}: {error}")

    sanitized_msg = sanitize_error_message(error)

    return HTTPException(status_code=status_code, detail=sanitized_msg)


def log_analysis_event(event_type: str, details: dict, user_id: Optional[str] = None):
    """
    Log host events (document opened, command run) for monitoring and debugging.

    Args:
        event_type: Type of event (e.g., 'document_opened', 'command_run')
        details: Event details
        user_id: Optional user identifier
    """
    log_data = {
        "event_type": event_type,
        "details": details,
    }
    if user_id:
        log_data["user_id"] = user_id

    logger.info(f"Analysis event: {log_data}")
