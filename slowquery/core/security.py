"""Security utilities: rate limiting, input limits, error sanitization."""

from fastapi import HTTPException
from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)


def validate_document_text(text: str, max_length: int = 200_000) -> None:
    """Reject oversized documents.

    Empty text is valid: it simply has no findings. The cap bounds the time
    spent in patterns with unbounded gaps on adversarial input.
    """
    if text is None:
        raise HTTPException(status_code=400, detail="Text is required")

    if len(text) > max_length:
        raise HTTPException(
            status_code=400,
            detail=f"Document exceeds maximum length of {max_length} characters",
        )


def sanitize_error_message(error: Exception) -> str:
    """Sanitize error messages to prevent information leakage."""
    error_str = str(error)

    # Don't expose internal paths or stack traces
    if "Traceback" in error_str or "File" in error_str and ".py" in error_str:
        return "An internal error occurred. Please check your input and try again."

    if len(error_str) > 200:
        return error_str[:200] + "..."

    return error_str
