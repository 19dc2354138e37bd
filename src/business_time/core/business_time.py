"""
Business time calculation.

Combines start-time clamping, business day and business hour
arithmetic into a single calculation over UTC instants.
"""

from datetime import datetime, timezone
from typing import Optional

from business_time.core.business_days import (
    add_business_days,
    add_business_hours,
    adjust_to_prev_business_time,
    now_civil,
    to_civil,
    to_instant,
)
from business_time.core.holidays import HolidaySet


def calculate_business_time(
    start: Optional[datetime],
    business_days: Optional[int],
    business_hours: Optional[int],
    holidays: HolidaySet,
) -> datetime:
    """
    Add business days, then business hours, to a starting instant.

    The start is first snapped back to the nearest valid business time,
    even when nothing is to be added. Days are always applied before hours.

    Args:
        start: Starting instant, or None for the current time.
        business_days: Business days to add (non-negative), or None.
        business_hours: Business hours to add (non-negative), or None.
        holidays: Set of holiday dates.

    Returns:
        The resulting instant in UTC.
    """
    current = to_civil(start) if start is not None else now_civil()

    current = adjust_to_prev_business_time(current, holidays).date

    if business_days:
        current = add_business_days(current, business_days, holidays)

    if business_hours:
        current = add_business_hours(current, business_hours, holidays)

    return to_instant(current)


def format_instant(instant: datetime) -> str:
    """Format a UTC instant as ISO 8601 with millisecond precision and a Z suffix."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
