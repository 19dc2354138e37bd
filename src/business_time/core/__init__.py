"""Core package - Pure business logic with no external dependencies."""

from business_time.core.business_days import (
    TimeAdjustment,
    add_business_days,
    add_business_hours,
    adjust_to_prev_business_time,
    is_business_day,
    is_within_working_hours,
    now_civil,
    now_utc,
    to_civil,
    to_instant,
)
from business_time.core.business_time import calculate_business_time, format_instant
from business_time.core.exceptions import (
    BusinessError,
    BusinessTimeError,
    ConfigurationError,
    ErrorCode,
    ExternalServiceError,
    HolidaySourceError,
    InfrastructureError,
    InvalidHolidayPayloadError,
    ValidationError,
)
from business_time.core.holidays import (
    FALLBACK_COLOMBIAN_HOLIDAYS,
    HolidaySet,
    get_fallback_holidays,
    is_holiday,
    parse_holiday_dates,
)

__all__ = [
    # Business calendar
    "TimeAdjustment",
    "add_business_days",
    "add_business_hours",
    "adjust_to_prev_business_time",
    "is_business_day",
    "is_within_working_hours",
    "now_civil",
    "now_utc",
    "to_civil",
    "to_instant",
    # Business time
    "calculate_business_time",
    "format_instant",
    # Holidays
    "FALLBACK_COLOMBIAN_HOLIDAYS",
    "HolidaySet",
    "get_fallback_holidays",
    "is_holiday",
    "parse_holiday_dates",
    # Exceptions
    "BusinessError",
    "BusinessTimeError",
    "ConfigurationError",
    "ErrorCode",
    "ExternalServiceError",
    "HolidaySourceError",
    "InfrastructureError",
    "InvalidHolidayPayloadError",
    "ValidationError",
]
