"""Call executor — global concurrency cap plus retry with backoff for remote calls."""

from __future__ import annotations

import logging
import random
import threading
import time
from collections.abc import Callable
from typing import Protocol, TypeVar
from urllib.error import URLError

from drive_untrash.config import DEFAULT_MAX_ATTEMPTS
from drive_untrash.drive.client import DriveApiError
from drive_untrash.restore.barrier import Counter

logger = logging.getLogger(__name__)

T = TypeVar("T")

RATE_LIMIT_REASONS = frozenset({"rateLimitExceeded", "userRateLimitExceeded"})


def should_retry(error: Exception) -> bool:
    """Classify a failed Drive call.

    Server-side (5xx) errors and the Drive rate-limit reasons are retryable,
    as are request timeouts. Anything else, including refused or reset
    connections, is terminal.
    """
    if _is_timeout(error):
        return True
    if not isinstance(error, DriveApiError):
        return False
    if 500 <= error.status_code < 600:
        return True
    return error.reason in RATE_LIMIT_REASONS


def _is_timeout(error: Exception) -> bool:
    # urlopen wraps connect timeouts in URLError; read timeouts surface bare.
    if isinstance(error, URLError):
        return isinstance(error.reason, TimeoutError)
    return isinstance(error, TimeoutError)


class BackoffCalculator(Protocol):
    def delay(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
        ...


class ExponentialBackoff:
    """Doubling delay with uniform jitter, capped at ``max_delay`` before jitter."""

    def __init__(
        self,
        base: float = 1.0,
        max_delay: float = 512.0,
        jitter: float = 1.0,
        rng: Callable[[], float] = random.random,
    ) -> None:
        self._base = base
        self._max_delay = max_delay
        self._jitter = jitter
        self._rng = rng

    def delay(self, attempt: int) -> float:
        exponent = max(attempt - 1, 0)
        return min(self._base * (2**exponent), self._max_delay) + self._rng() * self._jitter


def google_drive_backoff() -> ExponentialBackoff:
    """Backoff curve tuned for Drive: 1s, 2s, 4s ... up to 512s, plus up to 1s jitter."""
    return ExponentialBackoff(base=1.0, max_delay=512.0, jitter=1.0)


class RetryPolicy:
    """Pluggable classifier and backoff curve applied by CallExecutor."""

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff: BackoffCalculator | None = None,
        classifier: Callable[[Exception], bool] = should_retry,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.backoff: BackoffCalculator = backoff or google_drive_backoff()
        self.classifier = classifier


class CallExecutor:
    """Runs zero-argument remote calls under a process-wide concurrency cap.

    A slot is held only while an attempt is in flight; backoff sleeps happen
    outside the gate so waiting retries do not starve other callers.
    """

    def __init__(
        self,
        max_connections: int = 10,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_connections < 1:
            raise ValueError("max_connections must be at least 1")
        self._gate = threading.BoundedSemaphore(max_connections)
        self._policy = policy or RetryPolicy()
        self._sleep = sleep
        self.retries = Counter()

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def execute(self, operation: Callable[[], T]) -> T:
        """Invoke ``operation`` until it succeeds or fails terminally.

        Returns:
            Whatever ``operation`` returns.

        Raises:
            Exception: The error from the last attempt, when it is not
                retryable or the attempt budget is spent.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                with self._gate:
                    return operation()
            except Exception as exc:
                if not self._policy.classifier(exc):
                    raise
                if attempt >= self._policy.max_attempts:
                    logger.warning(
                        "[execute] retry budget exhausted; attempts:%d;error:%s", attempt, exc
                    )
                    raise
                delay = self._policy.backoff.delay(attempt)
                logger.debug(
                    "[execute] retrying; attempt:%d;max_attempts:%d;delay:%.2f;error:%s",
                    attempt,
                    self._policy.max_attempts,
                    delay,
                    exc,
                )
            self.retries.increment()
            self._sleep(delay)
