"""
Retry Service.

Bounded retry with exponential backoff and jitter for holiday fetches.
"""

import random
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, TypeVar

from business_time.config import settings
from business_time.core.exceptions import HolidaySourceError
from business_time.infrastructure.logging import get_logger
from business_time.infrastructure.metrics import get_metrics


logger = get_logger(__name__)

T = TypeVar("T")


class RetriesExhaustedError(HolidaySourceError):
    """Raised when every attempt allowed by the retry policy has failed."""

    def __init__(self, attempts: int, last_error: HolidaySourceError):
        super().__init__(f"{attempts} attempts failed, last error: {last_error.message}")
        self.attempts = attempts
        self.last_error = last_error


@dataclass(frozen=True)
class RetryPolicy:
    """Retry budget and backoff shape."""

    max_retries: int = 3
    base_delay_seconds: float = 1.0
    max_delay_seconds: float = 10.0
    jitter_ratio: float = 0.1

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            max_retries=settings.holidays.max_retries,
            base_delay_seconds=settings.holidays.base_delay_seconds,
            max_delay_seconds=settings.holidays.max_delay_seconds,
            jitter_ratio=settings.holidays.jitter_ratio,
        )

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1

    def backoff_delay(self, attempt: int, rng: Optional[random.Random] = None) -> float:
        """
        Delay in seconds before the given attempt.

        Attempt 0 is the initial call and never waits. Attempt k waits
        base * 2^(k-1) plus up to jitter_ratio of that, capped at max_delay.
        """
        if attempt <= 0:
            return 0.0
        jitter = (rng or random).random() * self.jitter_ratio
        delay = self.base_delay_seconds * (2 ** (attempt - 1)) * (1 + jitter)
        return min(delay, self.max_delay_seconds)


def fetch_with_retry(
    fetch: Callable[[str], T],
    url: str,
    policy: Optional[RetryPolicy] = None,
    sleep: Callable[[float], None] = time.sleep,
    rng: Optional[random.Random] = None,
) -> T:
    """
    Call fetch(url) until it succeeds or the retry budget is spent.

    Only HolidaySourceError (network, timeout, HTTP or payload failures)
    is retried; anything else propagates on the first occurrence.

    Args:
        fetch: Single-attempt fetch function.
        url: Holiday source location.
        policy: Retry policy, defaults to the configured one.
        sleep: Sleep function, injectable for tests.
        rng: Random source for jitter.

    Returns:
        The first successful fetch result.

    Raises:
        RetriesExhaustedError: If every attempt failed.
    """
    policy = policy or RetryPolicy.from_settings()
    metrics = get_metrics()
    errors: List[HolidaySourceError] = []

    for attempt in range(policy.total_attempts):
        if attempt > 0:
            delay = policy.backoff_delay(attempt, rng)
            logger.info(
                f"Retrying holiday fetch in {int(delay * 1000)}ms "
                f"(attempt {attempt + 1}/{policy.total_attempts})",
                extra={"extra_fields": {"attempt": attempt + 1, "delay_ms": int(delay * 1000)}}
            )
            sleep(delay)

        try:
            result = fetch(url)
        except HolidaySourceError as e:
            errors.append(e)
            metrics.holiday_fetch_attempts_total.inc(outcome="failure")
            logger.warning(
                f"Holiday fetch attempt {attempt + 1} failed: {e.message}",
                extra={"extra_fields": {
                    "attempt": attempt + 1,
                    "error_type": type(e).__name__,
                    "status_code": e.status_code,
                }}
            )
            continue

        metrics.holiday_fetch_attempts_total.inc(outcome="success")
        return result

    raise RetriesExhaustedError(len(errors), errors[-1]) from errors[-1]
