"""Retry policy applied around calls to external extraction services."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Backoff = Callable[[int], float]


def exponential_backoff(base_seconds: float = 1.0, factor: float = 2.0, max_seconds: float = 30.0) -> Backoff:
    """Delay before retry number `attempt` (1-based): base * factor ** (attempt - 1)."""

    def _delay(attempt: int) -> float:
        return min(base_seconds * factor ** max(attempt - 1, 0), max_seconds)

    return _delay


def fixed_backoff(seconds: float) -> Backoff:
    return lambda _attempt: seconds


@dataclass
class RetryPolicy:
    max_attempts: int = 3
    backoff: Backoff = field(default_factory=exponential_backoff)
    retry_on: Tuple[Type[BaseException], ...] = (ConnectionError, TimeoutError)
    sleep: Callable[[float], None] = time.sleep

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def call(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Invoke func, retrying on `retry_on` errors; the last error propagates."""
        attempt = 1
        while True:
            try:
                return func(*args, **kwargs)
            except self.retry_on as exc:
                if attempt >= self.max_attempts:
                    logger.warning("Giving up after %d attempt(s): %s", attempt, exc)
                    raise
                delay = self.backoff(attempt)
                logger.info("Attempt %d/%d failed (%s); retrying in %.1fs", attempt, self.max_attempts, exc, delay)
                self.sleep(delay)
                attempt += 1

    def with_retry_on(self, *exc_types: Type[BaseException]) -> "RetryPolicy":
        return RetryPolicy(
            max_attempts=self.max_attempts,
            backoff=self.backoff,
            retry_on=tuple(exc_types),
            sleep=self.sleep,
        )


def retry_policy_from_settings(settings: Dict[str, Any]) -> RetryPolicy:
    return RetryPolicy(
        max_attempts=int(settings.get("extraction_max_attempts", 3)),
        backoff=exponential_backoff(
            float(settings.get("extraction_backoff_seconds", 1.0)),
            float(settings.get("extraction_backoff_factor", 2.0)),
        ),
    )


__all__ = ["Backoff", "RetryPolicy", "exponential_backoff", "fixed_backoff", "retry_policy_from_settings"]
