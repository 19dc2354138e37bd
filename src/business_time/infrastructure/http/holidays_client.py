"""
Holiday Source Client.

Fetches the list of Colombian holiday dates from the configured
holiday source.
"""

import time
from datetime import date
from typing import Any, List, Optional

import requests
from requests.adapters import HTTPAdapter

from business_time.config import settings
from business_time.core.exceptions import (
    ConfigurationError,
    HolidaySourceError,
    InvalidHolidayPayloadError,
)
from business_time.infrastructure.logging import get_logger


logger = get_logger(__name__)


def validate_holiday_payload(payload: Any) -> List[str]:
    """
    Check that a decoded payload is a list of YYYY-MM-DD strings.

    Raises:
        InvalidHolidayPayloadError: If the payload has any other shape.
    """
    if not isinstance(payload, list):
        raise InvalidHolidayPayloadError()

    for value in payload:
        if not isinstance(value, str):
            raise InvalidHolidayPayloadError(f"Holiday entry is not a string: {value!r}")
        try:
            date.fromisoformat(value)
        except ValueError as e:
            raise InvalidHolidayPayloadError(f"Holiday entry is not a date: {value!r}") from e

    return payload


class HolidaysClient:
    """
    Client for the holiday source.

    One call is one attempt: retries and backoff are owned by the caller,
    so no transport-level retries are mounted on the session.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        """
        Initialize the holiday source client.

        Args:
            base_url: Default holiday source URL.
            timeout: Per-request timeout in seconds.
            user_agent: User-Agent header value.
        """
        self._base_url = base_url if base_url is not None else settings.holidays.url
        self._timeout = timeout or settings.holidays.timeout_seconds
        self._user_agent = user_agent or settings.holidays.user_agent
        self._session: Optional[requests.Session] = None

    @property
    def session(self) -> requests.Session:
        """Get or create the HTTP session."""
        if self._session is None:
            self._session = requests.Session()

            adapter = HTTPAdapter(max_retries=0, pool_connections=2, pool_maxsize=4)
            self._session.mount("http://", adapter)
            self._session.mount("https://", adapter)

            self._session.headers.update({
                "Accept": "application/json",
                "User-Agent": self._user_agent,
            })

        return self._session

    def fetch_holidays(self, url: Optional[str] = None) -> List[str]:
        """
        Fetch holiday dates from the holiday source.

        Args:
            url: Source URL, defaults to the configured one.

        Returns:
            Holiday dates as YYYY-MM-DD strings.

        Raises:
            ConfigurationError: If no URL is available.
            HolidaySourceError: On timeout, connection or HTTP error.
            InvalidHolidayPayloadError: If the body is not a list of dates.
        """
        target = url or self._base_url
        if not target:
            raise ConfigurationError("HOLIDAYS_URL", "Holiday source URL is not configured")

        start = time.time()
        try:
            response = self.session.get(target, timeout=self._timeout)
            response.raise_for_status()
            payload = response.json()

        except requests.exceptions.Timeout as e:
            raise HolidaySourceError(
                f"timeout after {self._timeout}s",
                duration_ms=int((time.time() - start) * 1000),
            ) from e

        except requests.exceptions.HTTPError as e:
            raise HolidaySourceError(
                f"HTTP {e.response.status_code}",
                status_code=e.response.status_code,
                duration_ms=int((time.time() - start) * 1000),
            ) from e

        except requests.exceptions.JSONDecodeError as e:
            raise InvalidHolidayPayloadError("Holiday source returned a non-JSON body") from e

        except requests.exceptions.RequestException as e:
            raise HolidaySourceError(
                f"request failed: {e}",
                duration_ms=int((time.time() - start) * 1000),
            ) from e

        holidays = validate_holiday_payload(payload)

        logger.debug(
            f"Fetched {len(holidays)} holidays from source",
            extra={"extra_fields": {
                "holiday_count": len(holidays),
                "duration_ms": int((time.time() - start) * 1000),
            }}
        )
        return holidays

    def close(self) -> None:
        """Close the HTTP session."""
        if self._session:
            self._session.close()
            self._session = None

    def __enter__(self) -> "HolidaysClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
