"""
Tests for retry with exponential backoff.
"""

import random
from unittest.mock import MagicMock

import pytest

from business_time.core.exceptions import (
    HolidaySourceError,
    InvalidHolidayPayloadError,
)
from business_time.services.retry import (
    RetriesExhaustedError,
    RetryPolicy,
    fetch_with_retry,
)


URL = "http://holidays.test/colombia"


@pytest.fixture
def no_jitter() -> MagicMock:
    rng = MagicMock()
    rng.random.return_value = 0.0
    return rng


class TestBackoffDelay:
    """Tests for RetryPolicy.backoff_delay."""

    def test_first_attempt_does_not_wait(self, no_jitter):
        assert RetryPolicy().backoff_delay(0, no_jitter) == 0.0

    def test_exponential_growth(self, no_jitter):
        policy = RetryPolicy()
        delays = [policy.backoff_delay(attempt, no_jitter) for attempt in (1, 2, 3)]
        assert delays == [1.0, 2.0, 4.0]

    def test_capped_at_max_delay(self, no_jitter):
        assert RetryPolicy().backoff_delay(5, no_jitter) == 10.0

    def test_jitter_stays_within_ratio(self):
        policy = RetryPolicy()
        rng = random.Random(42)
        for _ in range(50):
            delay = policy.backoff_delay(2, rng)
            assert 2.0 <= delay <= 2.2

    def test_total_attempts(self):
        assert RetryPolicy().total_attempts == 4
        assert RetryPolicy(max_retries=0).total_attempts == 1


class TestFetchWithRetry:
    """Tests for fetch_with_retry."""

    def test_first_success_does_not_sleep(self, no_jitter):
        fetch = MagicMock(return_value=["2025-01-01"])
        sleep = MagicMock()

        assert fetch_with_retry(fetch, URL, sleep=sleep, rng=no_jitter) == ["2025-01-01"]
        fetch.assert_called_once_with(URL)
        sleep.assert_not_called()

    def test_succeeds_after_failures(self, no_jitter):
        fetch = MagicMock(side_effect=[
            HolidaySourceError("timeout"),
            HolidaySourceError("HTTP 503", status_code=503),
            ["2025-01-01"],
        ])
        sleep = MagicMock()

        assert fetch_with_retry(fetch, URL, RetryPolicy(), sleep=sleep, rng=no_jitter) == ["2025-01-01"]
        assert fetch.call_count == 3
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]

    def test_exhausts_retry_budget(self, no_jitter):
        last = HolidaySourceError("connection refused")
        fetch = MagicMock(side_effect=[
            HolidaySourceError("timeout"),
            HolidaySourceError("timeout"),
            HolidaySourceError("timeout"),
            last,
        ])
        sleep = MagicMock()

        with pytest.raises(RetriesExhaustedError) as exc_info:
            fetch_with_retry(fetch, URL, RetryPolicy(), sleep=sleep, rng=no_jitter)

        assert fetch.call_count == 4
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0, 4.0]
        assert exc_info.value.attempts == 4
        assert exc_info.value.last_error is last
        assert exc_info.value.__cause__ is last

    def test_exhausted_error_is_a_source_error(self, no_jitter):
        fetch = MagicMock(side_effect=HolidaySourceError("down"))
        with pytest.raises(HolidaySourceError):
            fetch_with_retry(fetch, URL, RetryPolicy(max_retries=1), sleep=MagicMock(), rng=no_jitter)
        assert fetch.call_count == 2

    def test_invalid_payload_is_retried(self, no_jitter):
        fetch = MagicMock(side_effect=[InvalidHolidayPayloadError(), ["2025-01-01"]])
        assert fetch_with_retry(fetch, URL, sleep=MagicMock(), rng=no_jitter) == ["2025-01-01"]
        assert fetch.call_count == 2

    def test_unexpected_error_is_not_retried(self, no_jitter):
        fetch = MagicMock(side_effect=KeyError("boom"))
        sleep = MagicMock()

        with pytest.raises(KeyError):
            fetch_with_retry(fetch, URL, sleep=sleep, rng=no_jitter)

        fetch.assert_called_once()
        sleep.assert_not_called()

    def test_policy_defaults_from_settings(self):
        policy = RetryPolicy.from_settings()
        assert policy.max_retries == 3
        assert policy.base_delay_seconds == 1.0
        assert policy.max_delay_seconds == 10.0
