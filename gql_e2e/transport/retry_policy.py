"""Retry policy for the HTTP transport.

Query steps send exactly one request by default. A policy with retries is
only used when the run configuration asks for one, and only covers
transport failures (connection errors, timeouts, 5xx without a GraphQL
body).
"""

from dataclasses import dataclass


@dataclass
class RetryPolicy:
    """Configurable retry policy with exponential backoff."""
    max_retries: int = 0
    initial_delay: float = 0.5
    backoff_factor: float = 2.0
    max_delay: float = 10.0

    def get_delay(self, attempt: int) -> float:
        """Calculate delay for a given retry attempt (0-indexed).

        Args:
            attempt: Current attempt number (0 = first retry).

        Returns:
            Delay in seconds before next retry.
        """
        delay = self.initial_delay * (self.backoff_factor ** attempt)
        return min(delay, self.max_delay)


def no_retry_policy() -> RetryPolicy:
    """Create a no-retry policy (fail immediately)."""
    return RetryPolicy(max_retries=0)


def retry_policy_for(max_retries: int) -> RetryPolicy:
    """Create a backoff policy with ``max_retries`` retries (0 = none)."""
    if max_retries <= 0:
        return no_retry_policy()
    return RetryPolicy(max_retries=max_retries)
