"""Calendar Period Resolver.

Weeks run Monday 00:00:00.000 to Sunday 23:59:59.999 local time and are
identified by their Monday. Sunday belongs to the week that started on the
preceding Monday. Every other module keys weeks through ``period_for``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Union

from ..core.constants import DAYS_PER_WEEK
from ..core.exceptions import ValidationError

DateLike = Union[date, datetime]


@dataclass(frozen=True, order=True)
class WeekPeriod:
    week_start: date
    week_end: date

    @property
    def key(self) -> str:
        return self.week_start.isoformat()

    def contains(self, value: DateLike) -> bool:
        d = _as_date(value)
        return self.week_start <= d <= self.week_end


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Expected date or datetime, got {type(value)!r}")


def period_for(value: DateLike) -> WeekPeriod:
    d = _as_date(value)
    # isoweekday(): Monday=1 .. Sunday=7, so Sunday steps back six days.
    week_start = d - timedelta(days=d.isoweekday() - 1)
    return WeekPeriod(week_start=week_start, week_end=week_start + timedelta(days=DAYS_PER_WEEK - 1))


def recent_periods(today: DateLike, count: int) -> List[WeekPeriod]:
    """``count`` consecutive weeks ending with the week of ``today``, newest first."""

    if int(count) < 1:
        raise ValidationError("Week count must be at least 1")

    current = period_for(today)
    periods = []
    for i in range(int(count)):
        periods.append(period_for(current.week_start - timedelta(days=i * DAYS_PER_WEEK)))
    return periods
