"""
Bounded exponential-backoff retry policy for upstream calls.
"""

from dataclasses import dataclass, field
from typing import Final

# 503 Service Unavailable is the only status treated as transient
TRANSIENT_STATUSES: Final[frozenset[int]] = frozenset({503})


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry settings.

    Attempt n (1-based) that fails transiently is followed by a sleep of
    base_delay * multiplier ** (n - 1) seconds, up to max_attempts total.
    """

    max_attempts: int = 3
    base_delay: float = 0.5
    multiplier: float = 2.0
    retry_statuses: frozenset[int] = field(default=TRANSIENT_STATUSES)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay cannot be negative")
        if self.multiplier < 1:
            raise ValueError("multiplier must be at least 1")

    def should_retry(self, status: int, attempt: int) -> bool:
        return status in self.retry_statuses and attempt < self.max_attempts

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given failed attempt."""
        return self.base_delay * (self.multiplier ** (attempt - 1))
