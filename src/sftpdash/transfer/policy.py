"""
Retry budget and backoff for downloads.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field


@dataclass
class RetryPolicy:
    """
    How many times a failed download is retried, and how long to wait.

    ``retry_budget`` counts additional attempts. With a budget of ``n > 0``
    the download gets ``n`` retries plus one final attempt once the budget
    has run out, each after a forced reconnect, so up to ``n + 2`` attempts
    in total. A budget of 0 means the first failure is terminal.

    Examples:
        >>> RetryPolicy().max_total_attempts
        3
        >>> RetryPolicy(retry_budget=0).max_total_attempts
        1
    """

    retry_budget: int = 1

    # Seconds to wait before the first retry; 0 disables waiting
    initial_delay: float = 0.0

    # Maximum delay between attempts (seconds)
    max_delay: float = 30.0

    # delay = initial_delay * base^retry_index
    exponential_base: float = 2.0

    # ±25% random jitter on each delay
    jitter: bool = False

    def __post_init__(self):
        if self.retry_budget < 0:
            raise ValueError("retry_budget must be >= 0")
        if self.initial_delay < 0:
            raise ValueError("initial_delay must be >= 0")
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay must be >= initial_delay")
        if self.exponential_base < 1.0:
            raise ValueError("exponential_base must be >= 1.0")

    @property
    def max_total_attempts(self) -> int:
        return 1 if self.retry_budget == 0 else self.retry_budget + 2

    def get_delay(self, retry_index: int) -> float:
        """
        Delay before retry number ``retry_index`` (0-indexed).

        Returns:
            Delay in seconds, capped at ``max_delay``
        """
        if self.initial_delay == 0:
            return 0.0
        delay = self.initial_delay * (self.exponential_base**retry_index)
        if self.jitter:
            delay *= random.uniform(0.75, 1.25)
        return min(delay, self.max_delay)


@dataclass
class DownloadState:
    """Bookkeeping for one download across its attempts."""

    file_name: str
    remote_path: str
    attempts: int = 0
    reconnects: int = 0
    errors: list[BaseException] = field(default_factory=list)

    @property
    def last_error(self) -> BaseException | None:
        return self.errors[-1] if self.errors else None

    def record_failure(self, exception: BaseException) -> None:
        self.errors.append(exception)


DEFAULT_RETRY_POLICY = RetryPolicy()
