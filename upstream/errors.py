"""
Upstream errors.

Every failure talking to the service intake API surfaces as an
UpstreamError carrying the HTTP status (None when no response arrived)
and the parsed response body, if any.
"""

from typing import Any, Optional


class UpstreamError(Exception):
    """A request to the service intake API failed."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "upstreamStatus": self.status,
            "details": self.details,
        }


class UpstreamNotConfiguredError(UpstreamError):
    """SERVICE_INTAKE_API_URL or SERVICE_INTAKE_API_KEY is not set."""

    def __init__(self):
        super().__init__(
            "Service intake API is not configured. "
            "Set SERVICE_INTAKE_API_URL and SERVICE_INTAKE_API_KEY."
        )


class UpstreamTimeoutError(UpstreamError):
    """The upstream API did not answer within the request timeout."""
