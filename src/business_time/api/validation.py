"""
API Request Validation.

Uses Pydantic for query-string validation.
"""

import re
from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ValidationInfo, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from business_time.core.exceptions import ErrorCode, ValidationError


ISO_8601_UTC = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{3})?Z$")

# Strings a query count may take: decimal, exponent, Infinity, 0x/0o/0b forms.
NUMERIC = re.compile(
    r"^\s*(?:[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|[+-]?Infinity|0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+)?\s*$"
)
LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")


class BusinessTimeQuery(BaseModel):
    """Query string for /calculate-business-time."""

    days: Optional[int] = None
    hours: Optional[int] = None
    date: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def require_days_or_hours(cls, data: Any) -> Any:
        if isinstance(data, Mapping) and data.get("days") is None and data.get("hours") is None:
            raise PydanticCustomError(
                ErrorCode.INVALID_PARAMETERS.value,
                "At least one parameter (days or hours) must be provided",
            )
        return data

    @field_validator("days", "hours", mode="before")
    @classmethod
    def parse_count(cls, v: Any, info: ValidationInfo) -> Optional[int]:
        """
        Accept numeric strings and keep their leading integer part.

        "2.9" and "1e3" count as 2 and 1. A numeric string with no leading
        integer ("", "Infinity", ".5") counts as not given.
        """
        if v is None:
            return None

        label = info.field_name.capitalize()
        if not isinstance(v, str) or not NUMERIC.match(v):
            raise PydanticCustomError(
                ErrorCode.INVALID_PARAMETERS.value,
                f"{label} parameter must be a valid number",
            )

        prefix = LEADING_INTEGER.match(v)
        if prefix is None:
            return None

        parsed = int(prefix.group(1))
        if parsed < 0:
            raise PydanticCustomError(
                ErrorCode.NEGATIVE_VALUES.value,
                f"{label} parameter must be a positive integer",
            )
        return parsed

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> Optional[datetime]:
        """Accept only UTC ISO 8601 timestamps with a Z suffix."""
        if v is None:
            return None
        if not isinstance(v, str):
            raise PydanticCustomError(
                ErrorCode.INVALID_PARAMETERS.value,
                "Date parameter must be a string",
            )
        if not ISO_8601_UTC.match(v):
            raise PydanticCustomError(
                ErrorCode.INVALID_DATE_FORMAT.value,
                "Date must be in ISO 8601 format with Z suffix (e.g., 2025-08-01T14:00:00Z)",
            )
        try:
            return datetime.fromisoformat(v[:-1] + "+00:00")
        except ValueError:
            raise PydanticCustomError(ErrorCode.INVALID_DATE_FORMAT.value, "Invalid date")


def parse_business_time_query(args: Mapping[str, Any]) -> BusinessTimeQuery:
    """
    Validate query arguments.

    Raises:
        ValidationError: With the API error code of the first problem found.
    """
    try:
        return BusinessTimeQuery.model_validate(dict(args))
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else "query"
        try:
            code = ErrorCode(error["type"])
        except ValueError:
            code = ErrorCode.INVALID_PARAMETERS
        raise ValidationError(field, error["msg"], code) from e
