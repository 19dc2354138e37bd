"""
Business calendar module.

Handles civil-time conversion, business day and working-hours checks,
and business day/hour arithmetic for Colombia.
Pure business logic with no external dependencies.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

from business_time.config import settings
from business_time.core.holidays import HolidaySet, is_holiday


WORKING_HOURS = settings.calendar.working_hours
CIVIL_TZ = settings.calendar.tz


@dataclass(frozen=True)
class TimeAdjustment:
    """Result of snapping a civil datetime to valid business time."""
    date: datetime
    was_adjusted: bool
    reason: Optional[str] = None


def now_utc() -> datetime:
    """Get the current UTC datetime."""
    return datetime.now(timezone.utc)


def to_civil(instant: datetime) -> datetime:
    """
    Convert an instant to Colombian civil time.

    Naive datetimes are taken to be UTC.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(CIVIL_TZ)


def to_instant(civil: datetime) -> datetime:
    """
    Convert a Colombian civil datetime back to a UTC instant.

    Naive datetimes are taken to be civil time.
    """
    if civil.tzinfo is None:
        civil = civil.replace(tzinfo=CIVIL_TZ)
    return civil.astimezone(timezone.utc)


def now_civil() -> datetime:
    """Get the current datetime in Colombian civil time."""
    return to_civil(now_utc())


def _minutes_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def _at_hour(moment: datetime, hour: int) -> datetime:
    return moment.replace(hour=hour, minute=0, second=0, microsecond=0)


def is_business_day(check_date: Union[datetime, date], holidays: HolidaySet) -> bool:
    """
    Check if a date is a business day (not weekend, not holiday).

    Args:
        check_date: The civil date or datetime to check.
        holidays: Set of holiday dates.

    Returns:
        True if the date is a business day.
    """
    if isinstance(check_date, datetime):
        check_date = check_date.date()

    # Weekend check (Saturday=5, Sunday=6)
    if check_date.weekday() >= 5:
        return False

    return not is_holiday(check_date, holidays)


def is_within_working_hours(moment: datetime) -> bool:
    """Check if a civil time falls in the morning or afternoon working window."""
    minutes = _minutes_of_day(moment)
    return (
        WORKING_HOURS.start_minutes <= minutes < WORKING_HOURS.lunch_start_minutes
        or WORKING_HOURS.lunch_end_minutes <= minutes < WORKING_HOURS.end_minutes
    )


def adjust_to_prev_business_time(moment: datetime, holidays: HolidaySet) -> TimeAdjustment:
    """
    Snap a civil datetime backward to the nearest valid business time.

    - On a non-business day: previous business day at end of day.
    - Before opening: previous business day at end of day.
    - During lunch: start of lunch.
    - After closing: same day at end of day.

    Args:
        moment: Civil datetime to adjust.
        holidays: Set of holiday dates.

    Returns:
        TimeAdjustment with the resulting civil datetime.
    """
    current = moment
    moved = False

    while not is_business_day(current, holidays):
        current = current - timedelta(days=1)
        moved = True

    if moved:
        return TimeAdjustment(
            date=_at_hour(current, WORKING_HOURS.end),
            was_adjusted=True,
            reason="Moved to previous business day (weekend/holiday)",
        )

    minutes = _minutes_of_day(current)

    if minutes < WORKING_HOURS.start_minutes:
        current = _at_hour(current - timedelta(days=1), WORKING_HOURS.end)
        while not is_business_day(current, holidays):
            current = current - timedelta(days=1)
        return TimeAdjustment(
            date=current,
            was_adjusted=True,
            reason="Adjusted to previous business day end",
        )

    if WORKING_HOURS.lunch_start_minutes <= minutes < WORKING_HOURS.lunch_end_minutes:
        return TimeAdjustment(
            date=_at_hour(current, WORKING_HOURS.lunch_start),
            was_adjusted=True,
            reason="Adjusted to start of lunch break",
        )

    if minutes >= WORKING_HOURS.end_minutes:
        return TimeAdjustment(
            date=_at_hour(current, WORKING_HOURS.end),
            was_adjusted=True,
            reason="Adjusted to end of business day (after hours)",
        )

    return TimeAdjustment(date=current, was_adjusted=False)


def add_business_days(start: datetime, business_days: int, holidays: HolidaySet) -> datetime:
    """
    Add a number of business days to a civil datetime.

    The time of day is preserved. Adding zero days returns the input
    unchanged.

    Args:
        start: The starting civil datetime.
        business_days: Number of business days to add.
        holidays: Set of holiday dates.

    Returns:
        The civil datetime on the n-th following business day.
    """
    if business_days == 0:
        return start

    current = start
    days_added = 0

    while days_added < business_days:
        current = current + timedelta(days=1)
        if is_business_day(current, holidays):
            days_added += 1

    return current


def add_business_hours(start: datetime, business_hours: int, holidays: HolidaySet) -> datetime:
    """
    Add a number of business hours to a civil datetime.

    Lunch is never counted; work that would run into lunch resumes at
    the end of the break. Adding zero hours returns the input unchanged.

    Args:
        start: The starting civil datetime.
        business_hours: Number of business hours to add.
        holidays: Set of holiday dates.

    Returns:
        The resulting civil datetime.
    """
    if business_hours == 0:
        return start

    current = start
    remaining = business_hours * 60

    while remaining > 0:
        current = adjust_to_prev_business_time(current, holidays).date
        minutes = _minutes_of_day(current)

        before_lunch = 0
        if minutes < WORKING_HOURS.lunch_start_minutes:
            before_lunch = WORKING_HOURS.lunch_start_minutes - minutes

        after_lunch = 0
        if minutes < WORKING_HOURS.end_minutes:
            after_lunch = WORKING_HOURS.end_minutes - max(minutes, WORKING_HOURS.lunch_end_minutes)

        available_today = before_lunch + after_lunch

        if remaining <= available_today:
            if remaining <= before_lunch:
                current = current + timedelta(minutes=remaining)
            elif minutes < WORKING_HOURS.lunch_end_minutes:
                # Work the morning, then resume when lunch ends.
                current = current + timedelta(minutes=before_lunch)
                current = current.replace(hour=WORKING_HOURS.lunch_end, minute=0)
                current = current + timedelta(minutes=remaining - before_lunch)
            else:
                current = current + timedelta(minutes=remaining)
            remaining = 0
        else:
            remaining -= available_today
            current = _at_hour(current + timedelta(days=1), WORKING_HOURS.start)
            while not is_business_day(current, holidays):
                current = current + timedelta(days=1)

    return current
