"""
Services Layer.

Orchestration around external dependencies:
- Holiday data provider (cache, circuit breaker, fallback)
- Retry with backoff
"""

from business_time.services.holiday_provider import (
    CacheEntry,
    HolidayDataProvider,
    HolidayServiceResult,
    HolidayServiceStatus,
    HolidaySource,
    ServiceStatus,
)
from business_time.services.retry import (
    RetriesExhaustedError,
    RetryPolicy,
    fetch_with_retry,
)


__all__ = [
    "CacheEntry",
    "HolidayDataProvider",
    "HolidayServiceResult",
    "HolidayServiceStatus",
    "HolidaySource",
    "ServiceStatus",
    "RetriesExhaustedError",
    "RetryPolicy",
    "fetch_with_retry",
]
