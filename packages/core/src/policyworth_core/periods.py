"""Reporting period resolution.

Turns a requested period (quarter, year, year-to-date or custom range) into
an inclusive calendar range. The range length drives the proration of yearly
cost baselines, so it is counted exactly: both endpoints are included and
leap years contribute 366 days.
"""

import calendar
import datetime as dt
from typing import Optional

import structlog

from .exceptions import ValidationError
from .models.period import (
    MAX_YEAR,
    MIN_YEAR,
    CustomPeriod,
    DateRange,
    PeriodSpec,
    QuarterPeriod,
    YearPeriod,
    YearToDatePeriod,
)

logger = structlog.get_logger()

QUARTER_START_MONTHS = {1: 1, 2: 4, 3: 7, 4: 10}


def days_inclusive(from_date: dt.date, to_date: dt.date) -> int:
    """Count days from ``from_date`` to ``to_date``, both endpoints included."""
    return (to_date - from_date).days + 1


def _check_year(year: int) -> None:
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValidationError(
            f"Year must be between {MIN_YEAR} and {MAX_YEAR}, got {year}",
            field="year",
            value=year,
            constraint=f"{MIN_YEAR} <= year <= {MAX_YEAR}",
        )


def quarter_range(year: int, quarter: int) -> tuple[dt.date, dt.date]:
    """First and last day of a calendar quarter.

    Raises:
        ValidationError: If ``quarter`` is not 1 through 4 or ``year`` is
            outside the calendar.
    """
    _check_year(year)
    start_month = QUARTER_START_MONTHS.get(quarter)
    if start_month is None:
        raise ValidationError(
            f"Quarter must be 1, 2, 3 or 4, got {quarter}",
            field="quarter",
            value=quarter,
            constraint="1 <= quarter <= 4",
        )
    end_month = start_month + 2
    end_day = calendar.monthrange(year, end_month)[1]
    return dt.date(year, start_month, 1), dt.date(year, end_month, end_day)


def current_quarter(today: dt.date) -> int:
    """Quarter number that contains ``today``."""
    return (today.month - 1) // 3 + 1


def resolve_period(period: PeriodSpec, today: Optional[dt.date] = None) -> DateRange:
    """Resolve a period request to a concrete inclusive range.

    Args:
        period: The requested period
        today: Anchor for year-to-date periods (default: local current date)

    Returns:
        DateRange with both endpoints and the inclusive day count

    Raises:
        ValidationError: For an invalid year or quarter, or a custom period with a
            missing bound or with ``from_date`` after ``to_date``.
    """
    if isinstance(period, QuarterPeriod):
        from_date, to_date = quarter_range(period.year, period.quarter)
    elif isinstance(period, YearPeriod):
        _check_year(period.year)
        from_date, to_date = dt.date(period.year, 1, 1), dt.date(period.year, 12, 31)
    elif isinstance(period, YearToDatePeriod):
        anchor = today or dt.date.today()
        from_date, to_date = dt.date(anchor.year, 1, 1), anchor
    elif isinstance(period, CustomPeriod):
        if period.from_date is None or period.to_date is None:
            raise ValidationError(
                "Pick both start and end dates for Custom.",
                field="from_date" if period.from_date is None else "to_date",
                constraint="Both bounds are required",
            )
        if period.from_date > period.to_date:
            raise ValidationError(
                '"From" must be before "To".',
                field="from_date",
                value=f"{period.from_date.isoformat()} > {period.to_date.isoformat()}",
                constraint="from_date <= to_date",
            )
        from_date, to_date = period.from_date, period.to_date
    else:
        raise ValidationError(
            f"Unsupported period type: {type(period).__name__}",
            field="period",
        )

    resolved = DateRange(
        from_date=from_date,
        to_date=to_date,
        days=days_inclusive(from_date, to_date),
    )
    logger.debug(
        "period_resolved",
        kind=period.kind,
        from_date=from_date.isoformat(),
        to_date=to_date.isoformat(),
        days=resolved.days,
    )
    return resolved


def period_label(period: PeriodSpec, today: Optional[dt.date] = None) -> str:
    """Display label for a period, e.g. ``Q1 2024`` or ``YTD 2025``."""
    if isinstance(period, QuarterPeriod):
        return f"Q{period.quarter} {period.year}"
    if isinstance(period, YearPeriod):
        return f"Year {period.year}"
    if isinstance(period, YearToDatePeriod):
        return f"YTD {(today or dt.date.today()).year}"
    return "Custom"
