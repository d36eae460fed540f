"""
Calendar Period Boundaries

All calendar arithmetic of the ledger lives here, as pure functions.

Month lengths come from Python's proleptic Gregorian calendar
(calendar.monthrange): February has 29 days in leap years and December
is handled without any month+1 rollover. Bounds are inclusive and
expressed in the caller's timezone; the end bound is the last
representable instant of the last day (23:59:59.999999).
"""

import calendar
from datetime import date, datetime, time, tzinfo
from typing import Iterable, Optional

from equipment_ledger.models.export import Period, PeriodKind


Bounds = tuple[datetime, datetime]


def month_bounds(year: int, month: int, tz: tzinfo) -> Bounds:
    """Inclusive first and last instants of a calendar month."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")

    last_day = calendar.monthrange(year, month)[1]
    start = datetime.combine(date(year, month, 1), time.min, tzinfo=tz)
    end = datetime.combine(date(year, month, last_day), time.max, tzinfo=tz)
    return start, end


def year_bounds(year: int, tz: tzinfo) -> Bounds:
    """Inclusive first and last instants of a calendar year."""
    start = datetime.combine(date(year, 1, 1), time.min, tzinfo=tz)
    end = datetime.combine(date(year, 12, 31), time.max, tzinfo=tz)
    return start, end


def period_bounds(period: Period, tz: tzinfo) -> Optional[Bounds]:
    """Bounds of a period, or None for the whole history."""
    if period.kind == PeriodKind.MONTH:
        return month_bounds(period.year, period.month, tz)
    if period.kind == PeriodKind.YEAR:
        return year_bounds(period.year, tz)
    return None


def within(moment: datetime, bounds: Optional[Bounds]) -> bool:
    """True if moment falls inside the inclusive bounds (None = unbounded)."""
    if bounds is None:
        return True
    start, end = bounds
    return start <= moment <= end


def calendar_day(moment: datetime, tz: tzinfo) -> date:
    """Calendar date of an instant as seen in the given timezone."""
    return moment.astimezone(tz).date()


def distinct_years(
    moments: Iterable[datetime],
    tz: tzinfo,
    today: Optional[date] = None,
) -> list[int]:
    """
    Distinct calendar years of the given instants, newest first.

    Falls back to the current year when there are none so that year
    pickers are never blank.
    """
    years = {calendar_day(moment, tz).year for moment in moments}
    if not years:
        today = today or datetime.now(tz).date()
        return [today.year]
    return sorted(years, reverse=True)
