"""
Flask API Routes.

Defines all HTTP endpoints for the business-time service.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Tuple

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from business_time.api.validation import parse_business_time_query
from business_time.core import calculate_business_time, format_instant
from business_time.core.exceptions import ErrorCode, ValidationError
from business_time.infrastructure.logging import get_logger
from business_time.infrastructure.metrics import metrics_endpoint
from business_time.services import (
    HolidayDataProvider,
    HolidayServiceResult,
    HolidayServiceStatus,
)


logger = get_logger(__name__)


api_bp = Blueprint("api", __name__)


def _error_response(
    error: str,
    message: str,
    status_code: int,
) -> Tuple[Dict[str, Any], int]:
    """Create standardized error response."""
    return {
        "error": error,
        "message": message,
    }, status_code


def _provider() -> HolidayDataProvider:
    return current_app.extensions["holiday_provider"]


def _provenance_headers(result: HolidayServiceResult) -> Dict[str, str]:
    return {
        "X-Holiday-Service-Status": result.status.value,
        "X-Holiday-Data-Source": result.source.value,
        "X-Holiday-Last-Updated": (
            format_instant(result.last_updated) if result.last_updated else "never"
        ),
    }


# ============================================================================
# Business Time
# ============================================================================

@api_bp.route("/calculate-business-time", methods=["GET"])
def calculate() -> Any:
    """
    Add business days and/or hours to a date.

    Query parameters:
        days (int): Business days to add.
        hours (int): Business hours to add.
        date (str): UTC start in ISO 8601 with Z suffix; defaults to now.

    Returns:
        {"date": "<UTC ISO 8601>"} with holiday provenance headers.
    """
    query = parse_business_time_query(request.args.to_dict())

    holiday_result = _provider().get_holidays()

    if holiday_result.status != HolidayServiceStatus.HEALTHY:
        logger.warning(
            f"Holiday service is {holiday_result.status.value}, "
            f"using {holiday_result.source.value} data",
            extra={"extra_fields": {
                "holiday_status": holiday_result.status.value,
                "holiday_source": holiday_result.source.value,
            }}
        )

    result = calculate_business_time(
        query.date,
        query.days,
        query.hours,
        holiday_result.holidays,
    )

    response = jsonify({"date": format_instant(result)})
    response.headers.update(_provenance_headers(holiday_result))
    return response, 200


# ============================================================================
# Health & Status
# ============================================================================

@api_bp.route("/holiday-status", methods=["GET"])
def holiday_status() -> Tuple[Dict[str, Any], int]:
    """
    Holiday provider status.

    With ``?test=true`` also performs a holiday lookup and reports
    where the data came from.
    """
    provider = _provider()
    body = provider.get_service_status().to_dict()

    if request.args.get("test") == "true":
        logger.info("Testing holiday service connectivity")
        test_result = provider.get_holidays()
        body["testResult"] = {
            "success": True,
            "source": test_result.source.value,
            "status": test_result.status.value,
            "holidayCount": len(test_result.holidays),
        }

    return body, 200


@api_bp.route("/health", methods=["GET"])
def health_check() -> Tuple[Dict[str, Any], int]:
    """
    Health check endpoint.

    Reports 503 while the holiday provider's circuit is open.
    """
    service_status = _provider().get_service_status()
    holiday = service_status.to_dict()

    failed = service_status.status == HolidayServiceStatus.FAILED
    return {
        "status": "DEGRADED" if failed else "OK",
        "timestamp": format_instant(datetime.now(timezone.utc)),
        "services": {
            "holiday": {
                "status": holiday["status"],
                "circuitBreaker": holiday["circuitPhase"],
                "failures": holiday["failures"],
                "lastFetch": holiday["lastFetch"],
                "cacheAgeMs": holiday["cacheAgeMs"],
            },
        },
    }, 503 if failed else 200


@api_bp.route("/metrics", methods=["GET"])
def metrics() -> Any:
    """
    Prometheus metrics endpoint.
    """
    return metrics_endpoint()


# ============================================================================
# Error Handlers
# ============================================================================

@api_bp.errorhandler(ValidationError)
def handle_validation_error(error: ValidationError) -> Tuple[Dict[str, Any], int]:
    """Handle request validation errors (400)."""
    logger.info(
        f"Validation error: {error.message}",
        extra={"extra_fields": {"field": error.field, "error_code": error.error_code.value}}
    )
    return _error_response(error.error_code.value, error.message, 400)


@api_bp.app_errorhandler(404)
def handle_not_found(error: Exception) -> Tuple[Dict[str, Any], int]:
    """Handle unknown endpoints (404)."""
    return _error_response(
        "NotFound",
        f"Endpoint {request.method} {request.path} not found",
        404,
    )


@api_bp.app_errorhandler(Exception)
def handle_unexpected_error(error: Exception) -> Tuple[Dict[str, Any], int]:
    """Handle unexpected errors (500)."""
    if isinstance(error, HTTPException):
        return _error_response(error.name.replace(" ", ""), error.description or error.name, error.code or 500)

    logger.exception(
        f"Unexpected error: {error}",
        extra={"extra_fields": {"error_type": type(error).__name__}}
    )
    return _error_response(
        ErrorCode.INTERNAL_ERROR.value,
        "An unexpected error occurred while processing your request",
        500,
    )
