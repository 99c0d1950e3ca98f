"""Reporting period models.

A period is requested as one of four variants and resolved to a concrete,
inclusive calendar range by :mod:`policyworth_core.periods`.
"""

import datetime as dt
from decimal import Decimal
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DAYS_PER_YEAR = 365

# Years representable by datetime.date
MIN_YEAR = 1
MAX_YEAR = 9999


class QuarterPeriod(BaseModel):
    """A calendar quarter of a given year."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["quarter"] = "quarter"
    year: int = Field(ge=MIN_YEAR, le=MAX_YEAR)
    quarter: int = Field(ge=1, le=4)


class YearPeriod(BaseModel):
    """A full calendar year, January 1 through December 31."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["year"] = "year"
    year: int = Field(ge=MIN_YEAR, le=MAX_YEAR)


class YearToDatePeriod(BaseModel):
    """January 1 of the current year through today."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["ytd"] = "ytd"


class CustomPeriod(BaseModel):
    """An explicit inclusive range. Both bounds are required to resolve."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["custom"] = "custom"
    from_date: Optional[dt.date] = None
    to_date: Optional[dt.date] = None


PeriodSpec = Union[QuarterPeriod, YearPeriod, YearToDatePeriod, CustomPeriod]


class DateRange(BaseModel):
    """A resolved, inclusive reporting range.

    Attributes:
        from_date: First day of the range
        to_date: Last day of the range
        days: Number of days counting both endpoints
    """

    model_config = ConfigDict(frozen=True)

    from_date: dt.date
    to_date: dt.date
    days: int = Field(ge=1)

    @property
    def period_fraction(self) -> Decimal:
        """Length of the range as a fraction of a 365-day year."""
        return Decimal(self.days) / DAYS_PER_YEAR

    def prorate(self, yearly_amount: Decimal) -> Decimal:
        """Scale a yearly amount to this range.

        Multiplies before dividing so whole-year ranges stay exact.
        """
        return yearly_amount * self.days / DAYS_PER_YEAR

    def contains(self, day: dt.date) -> bool:
        """True when ``day`` falls inside the range, endpoints included."""
        return self.from_date <= day <= self.to_date

    def __str__(self) -> str:
        return f"{self.from_date.isoformat()} → {self.to_date.isoformat()}"
