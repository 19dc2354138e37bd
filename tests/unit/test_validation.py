"""
Tests for query-string validation.
"""

from datetime import datetime, timezone

import pytest

from business_time.api.validation import parse_business_time_query
from business_time.core.exceptions import ErrorCode, ValidationError


class TestParseBusinessTimeQuery:
    """Tests for parse_business_time_query."""

    def test_days_only(self):
        query = parse_business_time_query({"days": "3"})
        assert query.days == 3
        assert query.hours is None
        assert query.date is None

    def test_hours_and_date(self):
        query = parse_business_time_query({"hours": "4", "date": "2025-08-01T14:00:00Z"})
        assert query.hours == 4
        assert query.date == datetime(2025, 8, 1, 14, tzinfo=timezone.utc)

    def test_date_with_milliseconds(self):
        query = parse_business_time_query({"days": "1", "date": "2025-08-01T14:00:00.250Z"})
        assert query.date == datetime(2025, 8, 1, 14, 0, 0, 250000, tzinfo=timezone.utc)

    def test_decimals_are_truncated(self):
        query = parse_business_time_query({"days": "2.9", "hours": "0.5"})
        assert query.days == 2
        assert query.hours == 0

    @pytest.mark.parametrize("value,expected", [
        ("1e3", 1),
        (" 7 ", 7),
        ("+5", 5),
        ("-0.5", 0),
        ("0x10", 0),
    ])
    def test_keeps_leading_integer(self, value, expected):
        assert parse_business_time_query({"days": value}).days == expected

    @pytest.mark.parametrize("value", ["", "Infinity", ".5"])
    def test_numeric_without_leading_integer_counts_as_absent(self, value):
        query = parse_business_time_query({"days": value, "hours": "2"})
        assert query.days is None
        assert query.hours == 2

    def test_empty_count_still_satisfies_presence(self):
        query = parse_business_time_query({"days": ""})
        assert query.days is None
        assert query.hours is None

    def test_zero_is_allowed(self):
        assert parse_business_time_query({"days": "0"}).days == 0

    def test_missing_days_and_hours(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_business_time_query({"date": "2025-08-01T14:00:00Z"})

        assert exc_info.value.error_code == ErrorCode.INVALID_PARAMETERS
        assert exc_info.value.message == "At least one parameter (days or hours) must be provided"

    @pytest.mark.parametrize("args,message", [
        ({"days": "abc"}, "Days parameter must be a valid number"),
        ({"hours": "12abc"}, "Hours parameter must be a valid number"),
        ({"hours": "NaN"}, "Hours parameter must be a valid number"),
        ({"days": "1..2"}, "Days parameter must be a valid number"),
    ])
    def test_not_a_number(self, args, message):
        with pytest.raises(ValidationError) as exc_info:
            parse_business_time_query(args)

        assert exc_info.value.error_code == ErrorCode.INVALID_PARAMETERS
        assert exc_info.value.message == message

    @pytest.mark.parametrize("args,field", [
        ({"days": "-1"}, "days"),
        ({"hours": "-3"}, "hours"),
    ])
    def test_negative_values(self, args, field):
        with pytest.raises(ValidationError) as exc_info:
            parse_business_time_query(args)

        assert exc_info.value.error_code == ErrorCode.NEGATIVE_VALUES
        assert exc_info.value.field == field

    @pytest.mark.parametrize("value", [
        "2025-08-01",
        "2025-08-01T14:00:00",
        "2025-08-01T14:00:00+00:00",
        "2025-08-01 14:00:00Z",
        "2025-08-01T14:00:00.5Z",
    ])
    def test_bad_date_format(self, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_business_time_query({"days": "1", "date": value})

        assert exc_info.value.error_code == ErrorCode.INVALID_DATE_FORMAT
        assert "ISO 8601" in exc_info.value.message

    def test_impossible_date(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_business_time_query({"days": "1", "date": "2025-02-30T10:00:00Z"})

        assert exc_info.value.error_code == ErrorCode.INVALID_DATE_FORMAT
        assert exc_info.value.message == "Invalid date"
