"""API key check for the analysis endpoints."""

import hmac
import logging
from typing import Optional

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

from slowquery.core.config import settings

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def verify_api_key(api_key: Optional[str] = Security(api_key_header)) -> bool:
    """
    Dependency guarding every document and analysis route.

    A no-op unless ``settings.require_auth`` is on. When it is, the
    ``X-API-Key`` header must match ``settings.api_key``.

    Raises:
        HTTPException: 401 for a missing or wrong key, 500 when auth is
            required but the server has no key configured
    """
    if not settings.require_auth:
        return True

    if not settings.api_key:
        logger.warning("API key authentication required but no key configured")
        raise HTTPException(
            status_code=500,
            detail="Server configuration error: API key authentication not properly configured",
        )

    if not api_key:
        raise HTTPException(status_code=401, detail="API key required. Provide X-API-Key header.")

    if not hmac.compare_digest(api_key.encode(), settings.api_key.encode()):
        logger.info("Rejected request with invalid API key")
        raise HTTPException(status_code=401, detail="Invalid API key")

    return True
