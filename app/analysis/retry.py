"""Rate-limit aware retries around single model calls."""

import time
from collections.abc import Callable
from typing import TypeVar

from app.analysis.activity import ActivityRecorder
from app.analysis.exceptions import RetryExhaustedError
from app.logging.logger import Log
from app.providers.exceptions import RateLimitedError

T = TypeVar("T")

_RATE_LIMIT_MARKERS = ("429", "quota", "resource_exhausted", "resource exhausted", "rate limit")


def is_rate_limited(exc: BaseException) -> bool:
    """True when `exc` signals provider throttling rather than a real failure."""
    if isinstance(exc, RateLimitedError):
        return True
    if getattr(exc, "status_code", None) == 429 or getattr(exc, "status", None) == 429:
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _RATE_LIMIT_MARKERS)


class RetryingModelInvoker:
    """Runs a model call, backing off exponentially while it is rate-limited.

    The call runs at most `max_retries` times. Before retry `i` (counted from
    zero) it waits `initial_delay_seconds * 2 ** i`. Errors that are not rate
    limits propagate on the first occurrence.
    """

    def __init__(self, max_retries: int = 3, initial_delay_seconds: float = 5.0) -> None:
        if max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {max_retries}")
        self._max_retries = max_retries
        self._initial_delay = initial_delay_seconds

    def backoff_delay(self, attempt: int) -> float:
        return self._initial_delay * 2**attempt

    def invoke(
        self,
        call: Callable[[], T],
        *,
        description: str,
        activity: ActivityRecorder,
    ) -> T:
        for attempt in range(self._max_retries):
            try:
                return call()
            except Exception as exc:
                if not is_rate_limited(exc):
                    raise
                if attempt == self._max_retries - 1:
                    Log.warning(
                        f"{description}: still rate limited after {self._max_retries} attempts"
                    )
                    break
                delay = self.backoff_delay(attempt)
                activity.processing(
                    "Rate Limit Backoff",
                    f"{description} was rate limited. Retrying in {delay:g}s "
                    f"(attempt {attempt + 1} of {self._max_retries}).",
                )
                time.sleep(delay)
        raise RetryExhaustedError(description, self._max_retries)
