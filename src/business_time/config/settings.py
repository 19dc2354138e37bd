"""
Application configuration.

Centralizes environment variables, constants, and settings
using dataclasses for type safety and immutability.
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta, timezone, tzinfo


@dataclass(frozen=True)
class WorkingHours:
    """Working-hours window, expressed as hours of the day."""

    start: int = 8
    lunch_start: int = 12
    lunch_end: int = 13
    end: int = 17

    def __post_init__(self) -> None:
        if not (0 <= self.start < self.lunch_start < self.lunch_end < self.end <= 24):
            raise ValueError(
                "Working hours must satisfy start < lunch_start < lunch_end < end"
            )

    @property
    def start_minutes(self) -> int:
        return self.start * 60

    @property
    def lunch_start_minutes(self) -> int:
        return self.lunch_start * 60

    @property
    def lunch_end_minutes(self) -> int:
        return self.lunch_end * 60

    @property
    def end_minutes(self) -> int:
        return self.end * 60


@dataclass(frozen=True)
class CalendarSettings:
    """Civil timezone and working-hours settings."""

    timezone_name: str = "America/Bogota"
    # Colombia has not observed daylight saving since 1993.
    utc_offset_hours: int = -5
    working_hours: WorkingHours = field(default_factory=WorkingHours)

    @property
    def tz(self) -> tzinfo:
        """Fixed-offset timezone used for every business-rule check."""
        return timezone(timedelta(hours=self.utc_offset_hours), self.timezone_name)


@dataclass(frozen=True)
class HolidaySourceSettings:
    """Holiday source and resilience settings."""

    url: str = field(
        default_factory=lambda: os.environ.get("HOLIDAYS_URL", "").strip()
    )
    timeout_seconds: float = 10.0
    user_agent: str = "FechasHabilesAPI/1.0.0"

    cache_ttl_seconds: float = 24 * 60 * 60

    failure_threshold: int = 3
    circuit_timeout_seconds: float = 5 * 60

    max_retries: int = 3
    base_delay_seconds: float = 1.0
    max_delay_seconds: float = 10.0
    jitter_ratio: float = 0.1

    @property
    def is_configured(self) -> bool:
        """Check if the holiday source URL is set."""
        return bool(self.url)


@dataclass(frozen=True)
class Settings:
    """Main application settings."""

    holidays: HolidaySourceSettings = field(default_factory=HolidaySourceSettings)
    calendar: CalendarSettings = field(default_factory=CalendarSettings)
    port: int = field(default_factory=lambda: int(os.environ.get("PORT", 3000)))
    debug: bool = field(default_factory=lambda: os.environ.get("DEBUG", "false").lower() == "true")


# Singleton settings instance
settings = Settings()
