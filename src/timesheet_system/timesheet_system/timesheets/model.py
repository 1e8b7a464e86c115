from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from ..core.enums import TimesheetStatus
from ..entries.model import TimeEntry
from ..periods.resolver import WeekPeriod


@dataclass(frozen=True)
class Timesheet:
    """Domain entity: one employee's week. Unique per (user_id, week_start_date)."""

    timesheet_id: int
    user_id: int
    week_start_date: date
    week_end_date: date
    status: TimesheetStatus = TimesheetStatus.DRAFT
    submitted_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    approver_id: Optional[int] = None
    comments: Optional[str] = None

    @property
    def period(self) -> WeekPeriod:
        return WeekPeriod(week_start=self.week_start_date, week_end=self.week_end_date)


@dataclass(frozen=True)
class TimesheetView:
    """A timesheet with its entries.

    ``created`` is True when the read-or-create lookup had to insert the
    DRAFT row.
    """

    timesheet: Timesheet
    entries: List[TimeEntry] = field(default_factory=list)
    created: bool = False

    @property
    def total_hours(self) -> float:
        return sum(e.hours for e in self.entries)


@dataclass(frozen=True)
class PendingTimesheet:
    timesheet: Timesheet
    employee: dict
    entries: List[TimeEntry] = field(default_factory=list)
    total_hours: float = 0.0
