"""Configuration package."""

from business_time.config.settings import (
    CalendarSettings,
    HolidaySourceSettings,
    Settings,
    WorkingHours,
    settings,
)

__all__ = [
    "CalendarSettings",
    "HolidaySourceSettings",
    "Settings",
    "WorkingHours",
    "settings",
]
