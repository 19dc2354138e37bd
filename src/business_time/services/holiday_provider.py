"""
Holiday Data Provider.

Serves the best available holiday set: fresh cache, live fetch with
retries behind a circuit breaker, stale cache, then static fallback.
"""

import random
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

from business_time.config import settings
from business_time.core.business_days import now_utc, to_civil
from business_time.core.exceptions import InfrastructureError
from business_time.core.holidays import (
    HolidaySet,
    get_fallback_holidays,
    is_holiday,
    parse_holiday_dates,
)
from business_time.infrastructure.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitBreakerOpenError,
    CircuitState,
)
from business_time.infrastructure.http import HolidaysClient, validate_holiday_payload
from business_time.infrastructure.logging import get_logger
from business_time.infrastructure.metrics import get_metrics
from business_time.services.retry import RetryPolicy, fetch_with_retry


logger = get_logger(__name__)


class HolidayServiceStatus(str, Enum):
    """Health of the holiday data behind a result."""
    HEALTHY = "HEALTHY"
    DEGRADED = "DEGRADED"
    FAILED = "FAILED"


class HolidaySource(str, Enum):
    """Where a holiday set came from."""
    CACHE = "CACHE"
    API = "API"
    FALLBACK = "FALLBACK"


@dataclass(frozen=True)
class HolidayServiceResult:
    """Holiday set together with its provenance."""
    holidays: HolidaySet
    status: HolidayServiceStatus
    source: HolidaySource
    last_updated: Optional[datetime]


@dataclass(frozen=True)
class CacheEntry:
    """Last successfully fetched holiday set."""
    holidays: HolidaySet
    fetched_at: datetime

    def age(self, now: datetime) -> timedelta:
        return now - self.fetched_at

    def is_fresh(self, now: datetime, ttl: timedelta) -> bool:
        return self.age(now) < ttl


@dataclass(frozen=True)
class ServiceStatus:
    """Non-blocking snapshot of the provider's health."""
    status: HolidayServiceStatus
    circuit_state: CircuitState
    failures: int
    last_fetch: Optional[datetime]
    cache_age_ms: Optional[int]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "circuitPhase": self.circuit_state.value,
            "failures": self.failures,
            "lastFetch": self.last_fetch.isoformat() if self.last_fetch else None,
            "cacheAgeMs": self.cache_age_ms,
        }


class HolidayDataProvider:
    """
    Owner of the process-wide holiday cache and circuit breaker.

    Construct one per application and pass it to whatever needs holidays.
    Cache reads are lock-protected; live fetches are serialized so that
    concurrent cache misses result in a single fetch, and callers that
    waited reuse its result.
    """

    is_holiday = staticmethod(is_holiday)

    def __init__(
        self,
        fetch: Optional[Callable[[str], List[str]]] = None,
        default_location: Optional[str] = None,
        breaker: Optional[CircuitBreaker] = None,
        retry_policy: Optional[RetryPolicy] = None,
        cache_ttl_seconds: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Initialize the provider.

        Args:
            fetch: Single-attempt fetch taking a location and returning
                date strings. Defaults to a HolidaysClient.
            default_location: Location used when get_holidays gets none.
            breaker: Circuit breaker guarding the fetch.
            retry_policy: Retry budget and backoff.
            cache_ttl_seconds: Cache time-to-live.
            sleep: Sleep function used between retries.
            rng: Random source for backoff jitter.
        """
        self._client: Optional[HolidaysClient] = None
        if fetch is None:
            self._client = HolidaysClient()
            fetch = self._client.fetch_holidays
        self._fetch = fetch
        self._default_location = (
            default_location if default_location is not None else settings.holidays.url
        )
        self._breaker = breaker or CircuitBreaker(
            "holiday-source",
            CircuitBreakerConfig(
                failure_threshold=settings.holidays.failure_threshold,
                timeout_seconds=settings.holidays.circuit_timeout_seconds,
            ),
        )
        self._retry_policy = retry_policy or RetryPolicy.from_settings()
        self._ttl = timedelta(
            seconds=cache_ttl_seconds if cache_ttl_seconds is not None
            else settings.holidays.cache_ttl_seconds
        )
        self._sleep = sleep
        self._rng = rng

        self._cache: Optional[CacheEntry] = None
        self._cache_lock = Lock()
        self._fetch_lock = Lock()

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    @property
    def cache(self) -> Optional[CacheEntry]:
        with self._cache_lock:
            return self._cache

    def get_holidays(self, location: Optional[str] = None) -> HolidayServiceResult:
        """
        Get the current best holiday set.

        Never raises because the source is unavailable: falls back to
        stale cache, then to the embedded table.

        Args:
            location: Holiday source location, defaults to the configured one.

        Returns:
            HolidayServiceResult with provenance.
        """
        result = self._fresh_cache_result(now_utc())
        if result is None:
            with self._fetch_lock:
                # Another caller may have refreshed the cache while we waited.
                now = now_utc()
                result = self._fresh_cache_result(now) or self._refresh(location, now)

        get_metrics().holiday_results_total.inc(
            source=result.source.value,
            status=result.status.value,
        )
        return result

    def _fresh_cache_result(self, now: datetime) -> Optional[HolidayServiceResult]:
        entry = self.cache
        if entry is None or not entry.is_fresh(now, self._ttl):
            return None
        return HolidayServiceResult(
            holidays=entry.holidays,
            status=HolidayServiceStatus.HEALTHY,
            source=HolidaySource.CACHE,
            last_updated=entry.fetched_at,
        )

    def _refresh(self, location: Optional[str], now: datetime) -> HolidayServiceResult:
        url = location or self._default_location

        try:
            holidays = self._breaker.call(self._fetch_and_parse, url)
        except CircuitBreakerOpenError:
            logger.warning(
                "Circuit breaker is OPEN, using fallback holidays",
                extra={"extra_fields": {"circuit": self._breaker.name}}
            )
            return self.fallback_result(now)
        except InfrastructureError as e:
            logger.error(
                f"Failed to fetch holidays after retries: {e.message}",
                extra={"extra_fields": {
                    "error_type": type(e).__name__,
                    "failures": self._breaker.snapshot().failure_count,
                }}
            )
            stale = self.cache
            if stale is not None:
                logger.warning(
                    "Using stale cached holidays data due to source failure",
                    extra={"extra_fields": {"fetched_at": stale.fetched_at.isoformat()}}
                )
                return HolidayServiceResult(
                    holidays=stale.holidays,
                    status=HolidayServiceStatus.DEGRADED,
                    source=HolidaySource.CACHE,
                    last_updated=stale.fetched_at,
                )
            return self.fallback_result(now)

        with self._cache_lock:
            self._cache = CacheEntry(holidays=holidays, fetched_at=now)

        logger.info(
            "Successfully fetched fresh holidays data",
            extra={"extra_fields": {"holiday_count": len(holidays)}}
        )
        return HolidayServiceResult(
            holidays=holidays,
            status=HolidayServiceStatus.HEALTHY,
            source=HolidaySource.API,
            last_updated=now,
        )

    def _fetch_and_parse(self, url: str) -> HolidaySet:
        raw = fetch_with_retry(
            self._fetch_checked,
            url,
            policy=self._retry_policy,
            sleep=self._sleep,
            rng=self._rng,
        )
        return parse_holiday_dates(raw)

    def _fetch_checked(self, url: str) -> List[str]:
        """One fetch attempt whose payload must be a list of ISO dates."""
        return validate_holiday_payload(self._fetch(url))

    def fallback_result(self, now: Optional[datetime] = None) -> HolidayServiceResult:
        """Static holidays for the current and next civil year."""
        year = to_civil(now or now_utc()).year
        logger.warning(
            "Using static fallback holidays data",
            extra={"extra_fields": {"start_year": year, "end_year": year + 1}}
        )
        return HolidayServiceResult(
            holidays=parse_holiday_dates(get_fallback_holidays(year, year + 1)),
            status=HolidayServiceStatus.FAILED,
            source=HolidaySource.FALLBACK,
            last_updated=None,
        )

    def get_service_status(self) -> ServiceStatus:
        """Snapshot of breaker and cache state. Performs no I/O."""
        now = now_utc()
        circuit = self._breaker.snapshot()
        entry = self.cache

        cache_age = entry.age(now) if entry is not None else None

        if circuit.state == CircuitState.OPEN:
            status = HolidayServiceStatus.FAILED
        elif cache_age is not None and cache_age > self._ttl:
            status = HolidayServiceStatus.DEGRADED
        else:
            status = HolidayServiceStatus.HEALTHY

        return ServiceStatus(
            status=status,
            circuit_state=circuit.state,
            failures=circuit.failure_count,
            last_fetch=entry.fetched_at if entry is not None else None,
            cache_age_ms=int(cache_age.total_seconds() * 1000) if cache_age is not None else None,
        )

    def close(self) -> None:
        """Release the HTTP client, if this provider created one."""
        if self._client is not None:
            self._client.close()
