from __future__ import annotations

import calendar
from datetime import date as Date
from datetime import timedelta

from app.schemas.stats import DateRange, StatsPeriod


def resolve_date_range(period: StatsPeriod, *, today: Date) -> DateRange:
    """Inclusive reporting window for `period` ending on `today`."""
    if period == "week":
        start = today - timedelta(days=6)
    elif period == "month":
        start = today.replace(day=1)
    else:
        start = today.replace(month=1, day=1)
    return DateRange(start_date=start, end_date=today)


def month_date_range(year: int, month: int) -> DateRange:
    if not (1 <= month <= 12):
        raise ValueError("month must be 1..12")
    last_day = calendar.monthrange(year, month)[1]
    return DateRange(
        start_date=Date(year, month, 1),
        end_date=Date(year, month, last_day),
    )
