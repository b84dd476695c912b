"""Date utilities for monthbook.

Pure functions for month key validation, month arithmetic, date ranges and
formatting.
"""

import re
from datetime import date, datetime

from monthbook.domain.errors import InvalidMonthFormat
from monthbook.domain.models import Month

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def parse_month(value: str) -> Month:
    """Validate a month key and return it in canonical form.

    Args:
        value: Candidate month in YYYY-MM format.

    Returns:
        The validated Month.

    Raises:
        InvalidMonthFormat: If value is not a YYYY-MM calendar month.
    """
    match = _MONTH_RE.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise InvalidMonthFormat(value)
    year, month_num = int(match.group(1)), int(match.group(2))
    if year < 1 or not 1 <= month_num <= 12:
        raise InvalidMonthFormat(value)
    return Month(f"{year:04d}-{month_num:02d}")


def shift_month(month: Month, delta: int) -> Month:
    """Move a month forwards (positive delta) or backwards (negative delta)."""
    year, month_num = int(month[:4]), int(month[5:7])
    index = year * 12 + (month_num - 1) + delta
    return Month(f"{index // 12:04d}-{index % 12 + 1:02d}")


def lookback_start(month: Month, max_lookback: int) -> Month:
    """Earliest month a backward search from month may reach.

    Args:
        month: Month the search starts from (exclusive).
        max_lookback: Number of earlier months the search may visit.

    Returns:
        The oldest month inside the window.
    """
    if max_lookback < 1:
        raise ValueError("max_lookback must be at least 1")
    return shift_month(month, -max_lookback)


def current_month(today: date | None = None) -> Month:
    """Return the month key for today (or the given date)."""
    return Month((today or date.today()).strftime("%Y-%m"))


def month_range(month: Month) -> tuple[str, str, str]:
    """Calculate date range and label for a month.

    Args:
        month: Month in YYYY-MM format.

    Returns:
        Tuple of (since_date, until_date, label) where:
        - since_date: First day of month (YYYY-MM-DD)
        - until_date: First day of next month (YYYY-MM-DD)
        - label: Human-readable month (e.g., "October 2024")

    Raises:
        InvalidMonthFormat: If month is not a YYYY-MM calendar month.
    """
    month = parse_month(month)
    dt = datetime.strptime(month, "%Y-%m")
    since = dt.strftime("%Y-%m-01")
    until = f"{shift_month(month, 1)}-01"
    label = dt.strftime("%B %Y")
    return since, until, label
