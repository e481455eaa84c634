"""Exception types raised across the service."""
from __future__ import annotations


class GoogleAPIError(Exception):
    """Raised when a Google API request fails or credentials are missing."""


class AgentRunError(Exception):
    """Raised when the model call fails and the whole run is lost."""


class ApiError(Exception):
    """Request-level failure rendered as ``{success: false, error, code}``."""

    def __init__(self, status_code: int, error: str, code: str | None = None) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.code = code
