"""Exponential backoff policy for retrying transient failures."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded exponential backoff.

    Attempt ``n`` (1-based) waits ``base_delay * backoff_factor ** (n - 1)``
    seconds before attempt ``n + 1``, capped at ``max_delay``.

    Example:
        policy = RetryPolicy(max_attempts=3, base_delay=1.0)
        policy.delay_for(1)  # 1.0
        policy.delay_for(3)  # 4.0
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    backoff_factor: float = 2.0
    max_delay: float = 60.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must not be negative")

    def delay_for(self, attempt: int) -> float:
        """Delay in seconds after a failed ``attempt``."""
        if attempt < 1:
            raise ValueError("attempt numbers start at 1")
        return min(self.base_delay * self.backoff_factor ** (attempt - 1), self.max_delay)

    def can_retry(self, attempt: int) -> bool:
        """Whether another attempt is allowed after ``attempt``."""
        return attempt < self.max_attempts
