from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional

from ..core.enums import Role, TimesheetStatus
from ..core.exceptions import ValidationError
from ..periods.resolver import WeekPeriod


@dataclass(frozen=True)
class DateRange:
    """Inclusive filter on entry dates. A missing bound is open."""

    start: Optional[date] = None
    end: Optional[date] = None

    def __post_init__(self):
        if self.start and self.end and self.start > self.end:
            raise ValidationError("Start date must be on or before end date")

    def describe(self) -> dict:
        return {
            "start_date": self.start.isoformat() if self.start else "All time",
            "end_date": self.end.isoformat() if self.end else "Present",
        }


@dataclass(frozen=True)
class EmployeeRef:
    user_id: int
    first_name: str
    last_name: str
    email: str
    role: Role
    manager_name: Optional[str] = None

    @property
    def sort_key(self) -> tuple:
        return (self.last_name.lower(), self.first_name.lower(), self.user_id)


@dataclass(frozen=True)
class ProjectRef:
    project_id: int
    code: str
    name: str
    description: Optional[str] = None


@dataclass(frozen=True)
class EntryDetail:
    entry_date: date
    hours: float
    notes: Optional[str] = None


# Project -> employee


@dataclass(frozen=True)
class EmployeeHours:
    employee: EmployeeRef
    total_hours: float
    entries: List[EntryDetail] = field(default_factory=list)


@dataclass(frozen=True)
class ProjectBreakdown:
    project: ProjectRef
    employees: List[EmployeeHours]
    total_hours: float


# Employee -> project -> week


@dataclass(frozen=True)
class WeekHours:
    week_start: date
    hours: float
    status: TimesheetStatus


@dataclass(frozen=True)
class ProjectHours:
    project: ProjectRef
    total_hours: float
    weeks: List[WeekHours] = field(default_factory=list)


@dataclass(frozen=True)
class EmployeeBreakdown:
    employee: EmployeeRef
    projects: List[ProjectHours]
    total_hours: float


# Summary


@dataclass(frozen=True)
class ProjectTotal:
    project: ProjectRef
    total_hours: float


@dataclass(frozen=True)
class EmployeeTotal:
    employee: EmployeeRef
    total_hours: float


@dataclass(frozen=True)
class Summary:
    projects: List[ProjectTotal]
    employees: List[EmployeeTotal]
    total_hours: float


# Status matrix


@dataclass(frozen=True)
class StatusCell:
    status: str
    timesheet_id: Optional[int] = None
    submitted_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None


@dataclass(frozen=True)
class MatrixRow:
    employee: EmployeeRef
    weeks: Dict[str, StatusCell]


@dataclass(frozen=True)
class StatusMatrix:
    """Dense grid: every (direct report, week) pair has a cell."""

    weeks: List[WeekPeriod]
    matrix: List[MatrixRow]

    @property
    def cell_count(self) -> int:
        return sum(len(row.weeks) for row in self.matrix)
