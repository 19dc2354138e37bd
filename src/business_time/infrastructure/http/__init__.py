"""
HTTP Client Package.

External service clients:
- Holiday source
"""

from business_time.infrastructure.http.holidays_client import (
    HolidaysClient,
    validate_holiday_payload,
)


__all__ = [
    "HolidaysClient",
    "validate_holiday_payload",
]
