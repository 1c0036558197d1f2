"""
layer_deploy.retry — Bounded retry with exponential backoff.

Used only around layer-version publish.  Every exception counts as
retryable until the attempt budget is spent; the last error is re-raised.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from aws_lambda_powertools import Logger

from layer_deploy.protocols import Observer

logger = Logger(service="layer-deploy")

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 10.0

    def delay_for(self, attempt: int) -> float:
        """Backoff before retry number attempt (1-based)."""
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)


DEFAULT_PUBLISH_RETRY = RetryPolicy()


def retry_call(
    fn: Callable[[], T],
    policy: RetryPolicy = DEFAULT_PUBLISH_RETRY,
    *,
    label: str = "call",
    observer: Observer | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Invoke fn until it succeeds or policy.max_attempts is exhausted."""
    log = observer or logger
    attempts = max(policy.max_attempts, 1)
    attempt = 1
    while True:
        try:
            return fn()
        except Exception as exc:
            if attempt >= attempts:
                log.error(
                    f"error@{label} - all {attempts} attempts failed",
                    extra={"error_type": type(exc).__name__},
                )
                raise
            delay = policy.delay_for(attempt)
            log.warning(
                f"error@{label} - retry {attempt}/{attempts - 1} after {delay:.1f}s: {exc}",
                extra={"attempt": attempt, "error_type": type(exc).__name__},
            )
            sleep(delay)
            attempt += 1
