"""Tests for monthbook.dates pure functions."""

from datetime import date

import pytest

from monthbook.dates import current_month, lookback_start, month_range, parse_month, shift_month
from monthbook.domain.errors import InvalidMonthFormat
from monthbook.domain.models import Month


class TestParseMonth:
    """Tests for parse_month."""

    def test_valid_month(self) -> None:
        """Should accept a zero-padded YYYY-MM month."""
        assert parse_month("2024-10") == Month("2024-10")

    def test_surrounding_whitespace_is_ignored(self) -> None:
        """Should strip whitespace before validating."""
        assert parse_month(" 2024-01 ") == Month("2024-01")

    @pytest.mark.parametrize("value", ["2024-13", "2024-00", "2024-1", "24-01", "2024/01", "2024-01-01", "", "abcd-ef"])
    def test_invalid_months(self, value: str) -> None:
        """Should reject anything that is not a YYYY-MM calendar month."""
        with pytest.raises(InvalidMonthFormat):
            parse_month(value)

    def test_error_is_a_value_error(self) -> None:
        """Should be catchable as ValueError."""
        with pytest.raises(ValueError, match="Expected YYYY-MM"):
            parse_month("2024-13")


class TestShiftMonth:
    """Tests for shift_month."""

    def test_forward_within_year(self) -> None:
        assert shift_month(Month("2024-03"), 2) == "2024-05"

    def test_backward_crosses_year(self) -> None:
        """Should borrow from the year when going before January."""
        assert shift_month(Month("2024-01"), -1) == "2023-12"

    def test_forward_crosses_year(self) -> None:
        assert shift_month(Month("2024-12"), 1) == "2025-01"

    def test_many_years(self) -> None:
        assert shift_month(Month("2024-10"), -24) == "2022-10"


class TestLookbackStart:
    """Tests for lookback_start."""

    def test_default_window(self) -> None:
        """Should reach back exactly max_lookback months."""
        assert lookback_start(Month("2024-03"), 24) == "2022-03"

    def test_single_month_window(self) -> None:
        assert lookback_start(Month("2024-01"), 1) == "2023-12"

    def test_rejects_empty_window(self) -> None:
        with pytest.raises(ValueError):
            lookback_start(Month("2024-01"), 0)


class TestCurrentMonth:
    """Tests for current_month."""

    def test_given_date(self) -> None:
        assert current_month(date(2024, 2, 29)) == "2024-02"

    def test_today_has_month_shape(self) -> None:
        """Should always return a valid month key."""
        assert parse_month(current_month()) == current_month()


class TestMonthRange:
    """Tests for month_range."""

    def test_january_range(self) -> None:
        """Should calculate range for January."""
        since, until, label = month_range(Month("2025-01"))

        assert since == "2025-01-01"
        assert until == "2025-02-01"
        assert label == "January 2025"

    def test_december_range_crosses_year(self) -> None:
        """Should handle December (crosses year boundary)."""
        since, until, label = month_range(Month("2025-12"))

        assert since == "2025-12-01"
        assert until == "2026-01-01"
        assert label == "December 2025"

    def test_february_leap_year(self) -> None:
        """Should handle February in leap year."""
        since, until, label = month_range(Month("2024-02"))

        assert since == "2024-02-01"
        assert until == "2024-03-01"  # 29 days in Feb 2024
        assert label == "February 2024"

    def test_invalid_month_raises(self) -> None:
        """Should reject malformed months before computing anything."""
        with pytest.raises(InvalidMonthFormat):
            month_range(Month("2024-13"))
