"""API-key check for the visit webhook."""
from __future__ import annotations

import hmac

from fastapi import Header

from ahp_ops.core.config import get_settings
from ahp_ops.core.errors import ApiError
from ahp_ops.core.logging import logger


def is_authorized(provided: str | None) -> bool:
    """The service form sends AHP_API_KEY in ``x-api-key``; an unset key rejects everything."""
    settings = get_settings()
    if not settings.api_key_configured():
        return False
    if not provided:
        return False
    return hmac.compare_digest(provided, settings.ahp_api_key)


def require_api_key(x_api_key: str | None = Header(default=None, alias="x-api-key")) -> None:
    if not is_authorized(x_api_key):
        logger.warning("Rejected request with invalid API key")
        raise ApiError(status_code=401, error="Unauthorized", code="AUTH_ERROR")
