"""Report builders.

Pure functions over ``EntryReportRow`` sequences (and, for the status
matrix, users and timesheets). They never touch storage, which keeps the
arithmetic testable without a database.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple

from ..core.enums import NOT_CREATED
from ..entries.model import EntryReportRow
from ..periods.resolver import WeekPeriod
from ..timesheets.model import Timesheet
from ..users.model import User
from .model import (
    EmployeeBreakdown,
    EmployeeHours,
    EmployeeRef,
    EmployeeTotal,
    EntryDetail,
    MatrixRow,
    ProjectBreakdown,
    ProjectHours,
    ProjectRef,
    ProjectTotal,
    StatusCell,
    StatusMatrix,
    Summary,
    WeekHours,
)


def employee_ref(row: EntryReportRow) -> EmployeeRef:
    return EmployeeRef(
        user_id=row.user_id,
        first_name=row.first_name,
        last_name=row.last_name,
        email=row.email,
        role=row.role,
        manager_name=row.manager_name,
    )


def project_ref(row: EntryReportRow) -> ProjectRef:
    return ProjectRef(
        project_id=row.project_id,
        code=row.project_code,
        name=row.project_name,
        description=row.project_description,
    )


def build_project_employee_breakdown(
    rows: Iterable[EntryReportRow],
    *,
    active_only: bool = True,
) -> List[ProjectBreakdown]:
    """Group entries by project, then employee.

    Projects without hours are dropped. Projects are ordered by code,
    employees by last name (first name and id break ties), entries by date.
    """

    projects: Dict[int, ProjectRef] = {}
    grouped: Dict[int, Dict[int, Tuple[EmployeeRef, List[EntryReportRow]]]] = {}

    for row in rows:
        if active_only and not row.project_active:
            continue
        projects.setdefault(row.project_id, project_ref(row))
        per_employee = grouped.setdefault(row.project_id, {})
        per_employee.setdefault(row.user_id, (employee_ref(row), []))[1].append(row)

    out: List[ProjectBreakdown] = []
    for project_id, per_employee in grouped.items():
        employees: List[EmployeeHours] = []
        for emp, emp_rows in per_employee.values():
            emp_rows.sort(key=lambda r: (r.entry_date, r.entry_id))
            employees.append(
                EmployeeHours(
                    employee=emp,
                    total_hours=sum(r.hours for r in emp_rows),
                    entries=[EntryDetail(entry_date=r.entry_date, hours=r.hours, notes=r.notes) for r in emp_rows],
                )
            )
        employees.sort(key=lambda e: e.employee.sort_key)

        total = sum(e.total_hours for e in employees)
        if total > 0:
            out.append(ProjectBreakdown(project=projects[project_id], employees=employees, total_hours=total))

    out.sort(key=lambda p: (p.project.code, p.project.project_id))
    return out


def build_employee_project_breakdown(rows: Iterable[EntryReportRow]) -> List[EmployeeBreakdown]:
    """Group entries by employee, then project, then the owning timesheet's week.

    Employees without hours are dropped. Employees are ordered by name,
    projects by code, weeks by start date.
    """

    employees: Dict[int, EmployeeRef] = {}
    projects: Dict[int, ProjectRef] = {}
    # user -> project -> week_start -> [hours, status]
    grouped: Dict[int, Dict[int, Dict[object, list]]] = {}

    for row in rows:
        employees.setdefault(row.user_id, employee_ref(row))
        projects.setdefault(row.project_id, project_ref(row))
        weeks = grouped.setdefault(row.user_id, {}).setdefault(row.project_id, {})
        cell = weeks.setdefault(row.week_start_date, [0.0, row.timesheet_status])
        cell[0] += row.hours

    out: List[EmployeeBreakdown] = []
    for user_id, per_project in grouped.items():
        project_hours: List[ProjectHours] = []
        for project_id, weeks in per_project.items():
            week_rows = [
                WeekHours(week_start=week_start, hours=hours, status=status)
                for week_start, (hours, status) in sorted(weeks.items())
            ]
            project_hours.append(
                ProjectHours(
                    project=projects[project_id],
                    total_hours=sum(w.hours for w in week_rows),
                    weeks=week_rows,
                )
            )
        project_hours.sort(key=lambda p: (p.project.code, p.project.project_id))

        total = sum(p.total_hours for p in project_hours)
        if total > 0:
            out.append(EmployeeBreakdown(employee=employees[user_id], projects=project_hours, total_hours=total))

    out.sort(key=lambda e: e.employee.sort_key)
    return out


def build_summary(rows: Iterable[EntryReportRow]) -> Summary:
    project_refs: Dict[int, ProjectRef] = {}
    employee_refs: Dict[int, EmployeeRef] = {}
    by_project: Dict[int, float] = {}
    by_employee: Dict[int, float] = {}
    total = 0.0

    for row in rows:
        project_refs.setdefault(row.project_id, project_ref(row))
        employee_refs.setdefault(row.user_id, employee_ref(row))
        by_project[row.project_id] = by_project.get(row.project_id, 0.0) + row.hours
        by_employee[row.user_id] = by_employee.get(row.user_id, 0.0) + row.hours
        total += row.hours

    projects = [ProjectTotal(project=project_refs[pid], total_hours=h) for pid, h in by_project.items()]
    projects.sort(key=lambda p: (-p.total_hours, p.project.code))

    employees = [EmployeeTotal(employee=employee_refs[uid], total_hours=h) for uid, h in by_employee.items()]
    employees.sort(key=lambda e: (-e.total_hours,) + e.employee.sort_key)

    return Summary(projects=projects, employees=employees, total_hours=total)


def build_status_matrix(
    reports: Sequence[User],
    periods: Sequence[WeekPeriod],
    timesheets: Iterable[Timesheet],
) -> StatusMatrix:
    """One row per report, one cell per period; gaps become NOT_CREATED."""

    by_key: Dict[Tuple[int, object], Timesheet] = {(ts.user_id, ts.week_start_date): ts for ts in timesheets}

    matrix: List[MatrixRow] = []
    for user in sorted(reports, key=lambda u: u.sort_key):
        cells: Dict[str, StatusCell] = {}
        for period in periods:
            ts = by_key.get((user.user_id, period.week_start))
            if ts is None:
                cells[period.key] = StatusCell(status=NOT_CREATED)
            else:
                cells[period.key] = StatusCell(
                    status=ts.status.value,
                    timesheet_id=ts.timesheet_id,
                    submitted_at=ts.submitted_at,
                    approved_at=ts.approved_at,
                )
        matrix.append(
            MatrixRow(
                employee=EmployeeRef(
                    user_id=user.user_id,
                    first_name=user.first_name,
                    last_name=user.last_name,
                    email=user.email,
                    role=user.role,
                ),
                weeks=cells,
            )
        )

    return StatusMatrix(weeks=list(periods), matrix=matrix)
