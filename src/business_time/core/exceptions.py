"""
Custom exceptions for the business-time service.

Provides a hierarchy of business and infrastructure exceptions
for proper error handling and HTTP status code mapping.
"""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Error codes exposed in API error payloads."""
    INVALID_PARAMETERS = "InvalidParameters"
    INVALID_DATE_FORMAT = "InvalidDateFormat"
    NEGATIVE_VALUES = "NegativeValues"
    HOLIDAYS_SERVICE_ERROR = "HolidaysServiceError"
    INTERNAL_ERROR = "InternalError"


class BusinessTimeError(Exception):
    """Base exception for all business-time errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# =============================================================================
# Business Errors (4xx)
# =============================================================================

class BusinessError(BusinessTimeError):
    """Base exception for business logic errors (typically 4xx)."""
    pass


class ValidationError(BusinessError):
    """Raised when request validation fails."""

    def __init__(
        self,
        field: str,
        message: str,
        error_code: ErrorCode = ErrorCode.INVALID_PARAMETERS,
    ):
        super().__init__(
            message,
            {"field": field, "error_code": error_code.value}
        )
        self.field = field
        self.error_code = error_code


# =============================================================================
# Infrastructure Errors (5xx)
# =============================================================================

class InfrastructureError(BusinessTimeError):
    """Base exception for infrastructure errors (typically 5xx)."""
    pass


class ConfigurationError(InfrastructureError):
    """Raised when a configuration value is missing or inconsistent."""

    def __init__(self, config_name: str, message: Optional[str] = None):
        msg = message or f"Configuration missing: {config_name}"
        super().__init__(msg, {"config_name": config_name})
        self.config_name = config_name


class ExternalServiceError(InfrastructureError):
    """Raised when an external service call fails."""

    def __init__(
        self,
        service_name: str,
        message: str,
        status_code: Optional[int] = None,
        duration_ms: Optional[int] = None,
    ):
        super().__init__(
            f"{service_name} error: {message}",
            {
                "service_name": service_name,
                "status_code": status_code,
                "duration_ms": duration_ms,
            }
        )
        self.service_name = service_name
        self.status_code = status_code
        self.duration_ms = duration_ms


class HolidaySourceError(ExternalServiceError):
    """Raised when the holiday source cannot be reached or answers with an error."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        duration_ms: Optional[int] = None,
    ):
        super().__init__("HolidaySource", message, status_code, duration_ms)


class InvalidHolidayPayloadError(HolidaySourceError):
    """Raised when the holiday source answers with something other than a list of dates."""

    def __init__(self, message: str = "Invalid response format from holidays service"):
        super().__init__(message)
