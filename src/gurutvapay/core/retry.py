"""
Retry with exponential backoff around single transport attempts.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable

from .errors import error_from_failure
from .outcome import Failure, RequestOutcome, Success

__all__ = ["RetryPolicy", "raise_for_outcome"]


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry transient failures up to ``max_retries`` times.

    The delay before attempt ``n`` (``n >= 2``) is
    ``backoff_factor * 2 ** (n - 2)``. Non-transient failures return
    immediately without consuming a retry.
    """

    max_retries: int = 3
    backoff_factor: float = 0.5
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False, compare=False)

    def delay_before(self, attempt: int) -> float:
        if attempt < 2:
            return 0.0
        return self.backoff_factor * (2 ** (attempt - 2))

    def execute(self, attempt_fn: Callable[[], RequestOutcome]) -> RequestOutcome:
        total_attempts = self.max_retries + 1
        outcome: RequestOutcome = attempt_fn()
        for attempt in range(2, total_attempts + 1):
            if not isinstance(outcome, Failure) or not outcome.retryable:
                return outcome
            delay = self.delay_before(attempt)
            logging.warning(
                "Transient gateway failure (HTTP %s); retry %d/%d in %.2fs",
                outcome.status,
                attempt - 1,
                self.max_retries,
                delay,
            )
            if delay > 0:
                self.sleep(delay)
            outcome = attempt_fn()
        return outcome


def raise_for_outcome(outcome: RequestOutcome, url: str = "") -> Any:
    """
    Return the decoded body of a successful outcome or raise the mapped error.
    """
    if isinstance(outcome, Success):
        return outcome.body
    error = error_from_failure(outcome, url)
    logging.info("Gateway call failed: kind=%s status=%s", error.kind.value, error.status)
    raise error
