from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import Role, TimesheetStatus


@dataclass(frozen=True)
class TimeEntry:
    """Hours one user logged on one project for one day.

    Unique per (user_id, project_id, entry_date). Zero-hour days are not
    stored. ``project_code``/``project_name`` are filled in when the row was
    read joined with its project.
    """

    entry_id: int
    timesheet_id: int
    user_id: int
    project_id: int
    entry_date: date
    hours: float
    notes: Optional[str] = None
    project_code: Optional[str] = None
    project_name: Optional[str] = None


@dataclass(frozen=True)
class EntryReportRow:
    """Read-model for reports: an entry joined with user, project and timesheet."""

    entry_id: int
    entry_date: date
    hours: float
    notes: Optional[str]

    user_id: int
    first_name: str
    last_name: str
    email: str
    role: Role
    manager_name: Optional[str]

    project_id: int
    project_code: str
    project_name: str
    project_description: Optional[str]
    project_active: bool

    timesheet_id: int
    week_start_date: date
    week_end_date: date
    timesheet_status: TimesheetStatus
