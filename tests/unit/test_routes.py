"""
Tests for API Routes.

Tests the Flask HTTP endpoints.
"""

from unittest.mock import MagicMock

import pytest
from freezegun import freeze_time

from business_time.app import create_app
from business_time.core.exceptions import HolidaySourceError


@pytest.fixture
def failing_client(make_provider):
    """Client whose holiday source is down."""
    provider = make_provider(MagicMock(side_effect=HolidaySourceError("connection refused")))
    app = create_app({"TESTING": True}, provider=provider)
    return app.test_client()


class TestCalculateBusinessTime:
    """Tests for GET /calculate-business-time."""

    def test_adds_hours(self, client):
        """Friday 5 PM Colombia + 1h lands on Monday 9 AM."""
        response = client.get("/calculate-business-time?date=2025-08-01T22:00:00Z&hours=1")

        assert response.status_code == 200
        assert response.get_json() == {"date": "2025-08-04T14:00:00.000Z"}

    def test_adds_days_and_hours_across_holidays(self, client):
        response = client.get(
            "/calculate-business-time",
            query_string={"date": "2025-04-10T15:00:00Z", "days": "5", "hours": "4"},
        )

        assert response.status_code == 200
        assert response.get_json()["date"] == "2025-04-21T20:00:00.000Z"

    @freeze_time("2025-08-04 15:00:00")
    def test_defaults_to_now(self, client):
        response = client.get("/calculate-business-time?hours=1")

        assert response.status_code == 200
        assert response.get_json()["date"] == "2025-08-04T16:00:00.000Z"

    @freeze_time("2025-08-04 15:00:00")
    def test_provenance_headers_when_healthy(self, client):
        response = client.get("/calculate-business-time?days=1")

        assert response.headers["X-Holiday-Service-Status"] == "HEALTHY"
        assert response.headers["X-Holiday-Data-Source"] == "API"
        assert response.headers["X-Holiday-Last-Updated"] == "2025-08-04T15:00:00.000Z"

    def test_second_request_served_from_cache(self, client, fetch):
        client.get("/calculate-business-time?days=1")
        response = client.get("/calculate-business-time?days=1")

        assert response.headers["X-Holiday-Data-Source"] == "CACHE"
        assert fetch.call_count == 1

    def test_fallback_when_source_is_down(self, failing_client):
        response = failing_client.get("/calculate-business-time?date=2025-08-01T22:00:00Z&hours=1")

        assert response.status_code == 200
        assert response.get_json() == {"date": "2025-08-04T14:00:00.000Z"}
        assert response.headers["X-Holiday-Service-Status"] == "FAILED"
        assert response.headers["X-Holiday-Data-Source"] == "FALLBACK"
        assert response.headers["X-Holiday-Last-Updated"] == "never"

    def test_missing_parameters(self, client):
        response = client.get("/calculate-business-time")

        assert response.status_code == 400
        assert response.get_json() == {
            "error": "InvalidParameters",
            "message": "At least one parameter (days or hours) must be provided",
        }

    def test_non_numeric_days(self, client):
        response = client.get("/calculate-business-time?days=abc")

        assert response.status_code == 400
        assert response.get_json()["error"] == "InvalidParameters"

    def test_negative_hours(self, client):
        response = client.get("/calculate-business-time?hours=-2")

        assert response.status_code == 400
        assert response.get_json()["error"] == "NegativeValues"

    def test_invalid_date_format(self, client):
        response = client.get("/calculate-business-time?days=1&date=2025-08-01")

        assert response.status_code == 400
        assert response.get_json()["error"] == "InvalidDateFormat"

    def test_empty_days_only_adjusts(self, client):
        # Saturday 2 PM Colombia snaps back to Friday 5 PM
        response = client.get("/calculate-business-time?days=&date=2025-08-02T19:00:00Z")

        assert response.status_code == 200
        assert response.get_json() == {"date": "2025-08-01T22:00:00.000Z"}

    def test_exponent_keeps_leading_integer(self, client):
        response = client.get("/calculate-business-time?days=1e3&date=2025-08-01T15:00:00Z")

        assert response.status_code == 200
        assert response.get_json() == {"date": "2025-08-04T15:00:00.000Z"}

    def test_validation_does_not_touch_holiday_source(self, client, fetch):
        client.get("/calculate-business-time?days=-1")
        fetch.assert_not_called()


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    def test_health_ok(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.get_json()
        assert data["status"] == "OK"
        assert data["timestamp"].endswith("Z")
        assert data["services"]["holiday"] == {
            "status": "HEALTHY",
            "circuitBreaker": "CLOSED",
            "failures": 0,
            "lastFetch": None,
            "cacheAgeMs": None,
        }

    def test_health_degraded_when_circuit_open(self, failing_client):
        for _ in range(3):
            failing_client.get("/calculate-business-time?days=1")

        response = failing_client.get("/health")

        assert response.status_code == 503
        data = response.get_json()
        assert data["status"] == "DEGRADED"
        assert data["services"]["holiday"]["status"] == "FAILED"
        assert data["services"]["holiday"]["circuitBreaker"] == "OPEN"
        assert data["services"]["holiday"]["failures"] == 3


class TestHolidayStatusEndpoint:
    """Tests for GET /holiday-status."""

    def test_status_without_probe(self, client, fetch):
        response = client.get("/holiday-status")

        assert response.status_code == 200
        data = response.get_json()
        assert data["status"] == "HEALTHY"
        assert data["circuitPhase"] == "CLOSED"
        assert "testResult" not in data
        fetch.assert_not_called()

    def test_status_with_probe(self, client):
        response = client.get("/holiday-status?test=true")

        assert response.status_code == 200
        assert response.get_json()["testResult"] == {
            "success": True,
            "source": "API",
            "status": "HEALTHY",
            "holidayCount": 3,
        }

    def test_probe_reports_fallback(self, failing_client):
        response = failing_client.get("/holiday-status?test=true")

        result = response.get_json()["testResult"]
        assert result["source"] == "FALLBACK"
        assert result["status"] == "FAILED"
        assert result["holidayCount"] > 0


class TestMetricsEndpoint:
    """Tests for GET /metrics."""

    def test_prometheus_text(self, client):
        client.get("/calculate-business-time?days=1")
        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.mimetype == "text/plain"
        body = response.get_data(as_text=True)
        assert "# TYPE http_requests_total counter" in body
        assert "holiday_results_total" in body
        assert "circuit_breaker_state" in body


class TestErrorHandlers:
    """Tests for JSON error handlers."""

    def test_unknown_endpoint(self, client):
        response = client.get("/does-not-exist")

        assert response.status_code == 404
        assert response.get_json() == {
            "error": "NotFound",
            "message": "Endpoint GET /does-not-exist not found",
        }

    def test_method_not_allowed(self, client):
        response = client.post("/health")

        assert response.status_code == 405
        assert response.get_json()["error"] == "MethodNotAllowed"

    def test_unexpected_error(self, make_provider):
        provider = make_provider(MagicMock(side_effect=RuntimeError("boom")))
        app = create_app({"TESTING": True}, provider=provider)

        response = app.test_client().get("/calculate-business-time?days=1")

        assert response.status_code == 500
        assert response.get_json() == {
            "error": "InternalError",
            "message": "An unexpected error occurred while processing your request",
        }
