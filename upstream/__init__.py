"""
Upstream service intake API access.
"""

from .client import IntakeApiClient
from .errors import UpstreamError, UpstreamNotConfiguredError, UpstreamTimeoutError
from .retry import RetryPolicy

__all__ = [
    "IntakeApiClient",
    "UpstreamError",
    "UpstreamNotConfiguredError",
    "UpstreamTimeoutError",
    "RetryPolicy",
]
