"""
Test Configuration and Fixtures.

Provides shared fixtures for all tests.
"""

import random
from datetime import date
from typing import Callable, Optional
from unittest.mock import MagicMock

import pytest
from flask import Flask
from flask.testing import FlaskClient

from business_time.app import create_app
from business_time.services import HolidayDataProvider


HOLIDAYS_URL = "http://holidays.test/colombia"


@pytest.fixture
def holidays() -> frozenset:
    """Holiday set used by calendar tests."""
    return frozenset({date(2025, 4, 17), date(2025, 4, 18), date(2025, 12, 25)})


@pytest.fixture
def holiday_payload() -> list:
    """Holiday source payload matching the holidays fixture."""
    return ["2025-04-17", "2025-04-18", "2025-12-25"]


@pytest.fixture
def fetch(holiday_payload: list) -> MagicMock:
    """Single-attempt fetch that succeeds."""
    return MagicMock(return_value=holiday_payload)


@pytest.fixture
def sleep() -> MagicMock:
    """Recorded no-op sleep."""
    return MagicMock()


@pytest.fixture
def make_provider(sleep: MagicMock) -> Callable[..., HolidayDataProvider]:
    """Build providers that never touch the network or really sleep."""
    def _make(fetch: Optional[MagicMock] = None) -> HolidayDataProvider:
        return HolidayDataProvider(
            fetch=fetch or MagicMock(return_value=[]),
            default_location=HOLIDAYS_URL,
            sleep=sleep,
            rng=random.Random(0),
        )
    return _make


@pytest.fixture
def provider(make_provider, fetch: MagicMock) -> HolidayDataProvider:
    """Provider backed by a healthy holiday source."""
    return make_provider(fetch)


@pytest.fixture
def app(provider: HolidayDataProvider) -> Flask:
    """Create test Flask application."""
    return create_app({"TESTING": True}, provider=provider)


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """Create test client."""
    return app.test_client()
