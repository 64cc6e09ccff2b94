"""Reporting period handling.

Dates are compared as plain ``YYYY-MM-DD`` strings; no timezone conversion
is performed.
"""

from __future__ import annotations

import calendar
import re
from datetime import date
from typing import Optional

from linen_tool.models import InvalidPeriod, PeriodFilter

REPORT_YEAR_MIN = 2020
REPORT_YEAR_MAX = 2030

_MONTH_RE = re.compile(r"^(\d{4})-(\d{1,2})$")


def make_period(year: int, month: Optional[int] = None) -> PeriodFilter:
    """Build a validated period filter."""
    if isinstance(year, bool) or not isinstance(year, int):
        raise InvalidPeriod(f"Year must be an integer, got {year!r}")
    if year < REPORT_YEAR_MIN or year > REPORT_YEAR_MAX:
        raise InvalidPeriod(f"Year must be between {REPORT_YEAR_MIN} and {REPORT_YEAR_MAX}")
    if month is not None:
        if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
            raise InvalidPeriod("Month must be between 1 and 12")
    return PeriodFilter(year=year, month=month)


def parse_month(value: str) -> PeriodFilter:
    """Parse a ``YYYY-MM`` string into a monthly period."""
    match = _MONTH_RE.match((value or "").strip())
    if not match:
        raise InvalidPeriod(f"Invalid month format {value!r}. Use YYYY-MM")
    return make_period(int(match.group(1)), int(match.group(2)))


def period_date_range(period: PeriodFilter) -> tuple[str, str]:
    """Inclusive first and last day of the period as ISO strings.

    Only the month is checked here; the reporting year bounds are applied
    where periods are built from user input (``make_period``, ``parse_month``).
    """
    if period.month is not None and not 1 <= period.month <= 12:
        raise InvalidPeriod("Month must be between 1 and 12")
    if period.month is None:
        return f"{period.year:04d}-01-01", f"{period.year:04d}-12-31"
    last_day = calendar.monthrange(period.year, period.month)[1]
    return (
        f"{period.year:04d}-{period.month:02d}-01",
        f"{period.year:04d}-{period.month:02d}-{last_day:02d}",
    )


def previous_month(period: PeriodFilter) -> PeriodFilter:
    """The calendar month before a monthly period (not year-bounded)."""
    if period.month is None:
        raise InvalidPeriod("Previous month requires a monthly period")
    if period.month == 1:
        return PeriodFilter(year=period.year - 1, month=12)
    return PeriodFilter(year=period.year, month=period.month - 1)


def in_range(pickup_date: date | str, start: str, end: str) -> bool:
    day = pickup_date if isinstance(pickup_date, str) else pickup_date.isoformat()
    return start <= day <= end
