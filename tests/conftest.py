from __future__ import annotations

import os
from dataclasses import replace
from datetime import date, datetime
from typing import Dict, Optional, Sequence

import pytest

from timesheet_system.container import wire_services
from timesheet_system.core.enums import Role, TimesheetStatus
from timesheet_system.core.exceptions import ConflictError
from timesheet_system.entries.model import EntryReportRow, TimeEntry
from timesheet_system.periods.resolver import period_for
from timesheet_system.projects.model import AssignmentRow, Project, ProjectAssignment
from timesheet_system.timesheets.model import Timesheet
from timesheet_system.users.model import Actor, User

os.environ.setdefault("APP_ENV", "testing")

# Wednesday; its week runs 2024-01-15 .. 2024-01-21.
FIXED_NOW = datetime(2024, 1, 17, 10, 30)


class FakeUserRepo:
    def __init__(self):
        self.users: Dict[int, User] = {}
        self._next_id = 1

    def add(self, **kwargs) -> User:
        user = User(user_id=self._next_id, **kwargs)
        self.users[user.user_id] = user
        self._next_id += 1
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    def list_all(self) -> Sequence[User]:
        return sorted(self.users.values(), key=lambda u: u.sort_key)

    def list_direct_reports(self, manager_id: int, *, role: Optional[Role] = Role.EMPLOYEE) -> Sequence[User]:
        return sorted(
            (u for u in self.users.values() if u.manager_id == manager_id and (role is None or u.role == role)),
            key=lambda u: u.sort_key,
        )

    def create_user(self, *, email, first_name, last_name, password_hash, role, manager_id) -> int:
        if self.get_by_email(email):
            raise ConflictError("duplicate email")
        return self.add(
            email=email,
            first_name=first_name,
            last_name=last_name,
            password_hash=password_hash,
            role=role,
            manager_id=manager_id,
        ).user_id

    def update_user(self, user_id, *, email, first_name, last_name, role, manager_id) -> bool:
        current = self.users[int(user_id)]
        self.users[current.user_id] = replace(
            current, email=email, first_name=first_name, last_name=last_name, role=role, manager_id=manager_id
        )
        return True

    def delete_by_id(self, user_id: int) -> bool:
        return self.users.pop(int(user_id), None) is not None


class FakeProjectRepo:
    def __init__(self, users: FakeUserRepo):
        self._users = users
        self.projects: Dict[int, Project] = {}
        self.assignments: Dict[int, ProjectAssignment] = {}
        self._next_id = 1
        self._next_assignment_id = 1

    def add(self, code: str, name: str, *, active: bool = True, description: Optional[str] = None) -> Project:
        project = Project(project_id=self._next_id, code=code, name=name, description=description, active=active)
        self.projects[project.project_id] = project
        self._next_id += 1
        return project

    def get_by_id(self, project_id: int) -> Optional[Project]:
        return self.projects.get(int(project_id))

    def get_by_code(self, code: str) -> Optional[Project]:
        return next((p for p in self.projects.values() if p.code == code), None)

    def list_projects(self, *, active_only: bool = True) -> Sequence[Project]:
        return sorted((p for p in self.projects.values() if p.active or not active_only), key=lambda p: p.code)

    def list_assigned(self, user_id: int, *, today: date) -> Sequence[Project]:
        ids = {a.project_id for a in self.assignments.values() if a.user_id == user_id and a.is_current(today)}
        return sorted((p for p in self.projects.values() if p.project_id in ids and p.active), key=lambda p: p.code)

    def create_project(self, *, code, name, description) -> int:
        return self.add(code, name, description=description).project_id

    def update_project(self, project_id, *, code, name, description, active) -> bool:
        current = self.projects[int(project_id)]
        self.projects[current.project_id] = replace(
            current, code=code, name=name, description=description, active=active
        )
        return True

    def get_assignment(self, *, user_id: int, project_id: int) -> Optional[ProjectAssignment]:
        return next(
            (a for a in self.assignments.values() if a.user_id == user_id and a.project_id == project_id),
            None,
        )

    def list_assignments(self) -> Sequence[AssignmentRow]:
        rows = []
        for a in self.assignments.values():
            user = self._users.get_by_id(a.user_id)
            project = self.projects[a.project_id]
            rows.append(
                AssignmentRow(
                    assignment=a,
                    user_name=user.display_name,
                    user_email=user.email,
                    project_code=project.code,
                    project_name=project.name,
                    project_active=project.active,
                )
            )
        return rows

    def create_assignment(self, *, user_id, project_id, start_date, end_date) -> int:
        if self.get_assignment(user_id=user_id, project_id=project_id):
            raise ConflictError("duplicate assignment")
        assignment = ProjectAssignment(
            assignment_id=self._next_assignment_id,
            user_id=user_id,
            project_id=project_id,
            start_date=start_date,
            end_date=end_date,
        )
        self.assignments[assignment.assignment_id] = assignment
        self._next_assignment_id += 1
        return assignment.assignment_id

    def delete_assignment(self, *, user_id: int, project_id: int) -> bool:
        found = self.get_assignment(user_id=user_id, project_id=project_id)
        if not found:
            return False
        del self.assignments[found.assignment_id]
        return True


class FakeTimesheetRepo:
    def __init__(self):
        self.timesheets: Dict[int, Timesheet] = {}
        self._next_id = 1
        self.create_calls = 0

    def add(self, user_id: int, week_start: date, status: TimesheetStatus = TimesheetStatus.DRAFT, **kwargs) -> Timesheet:
        period = period_for(week_start)
        ts = Timesheet(
            timesheet_id=self._next_id,
            user_id=user_id,
            week_start_date=period.week_start,
            week_end_date=period.week_end,
            status=status,
            **kwargs,
        )
        self.timesheets[ts.timesheet_id] = ts
        self._next_id += 1
        return ts

    def get_by_id(self, timesheet_id: int) -> Optional[Timesheet]:
        return self.timesheets.get(int(timesheet_id))

    def get_for_user_and_week(self, user_id: int, week_start: date) -> Optional[Timesheet]:
        return next(
            (t for t in self.timesheets.values() if t.user_id == user_id and t.week_start_date == week_start),
            None,
        )

    def create(self, *, user_id: int, week_start: date, week_end: date) -> int:
        self.create_calls += 1
        if self.get_for_user_and_week(user_id, week_start):
            raise ConflictError("duplicate week")
        return self.add(user_id, week_start).timesheet_id

    def list_for_users(self, user_ids, *, status=None, since=None, until=None) -> Sequence[Timesheet]:
        out = [
            t
            for t in self.timesheets.values()
            if t.user_id in set(user_ids)
            and (status is None or t.status == status)
            and (since is None or t.week_start_date >= since)
            and (until is None or t.week_start_date <= until)
        ]
        return sorted(out, key=lambda t: (t.submitted_at is None, t.submitted_at or datetime.min, t.week_start_date))

    def _swap(self, timesheet_id: int, expected: TimesheetStatus, **changes) -> bool:
        current = self.timesheets.get(int(timesheet_id))
        if current is None or current.status != expected:
            return False
        self.timesheets[current.timesheet_id] = replace(current, **changes)
        return True

    def mark_submitted(self, timesheet_id, *, expected, submitted_at) -> bool:
        return self._swap(timesheet_id, expected, status=TimesheetStatus.SUBMITTED, submitted_at=submitted_at)

    def mark_approved(self, timesheet_id, *, expected, approved_at, approver_id, comments) -> bool:
        return self._swap(
            timesheet_id,
            expected,
            status=TimesheetStatus.APPROVED,
            approved_at=approved_at,
            approver_id=approver_id,
            comments=comments,
        )

    def mark_rejected(self, timesheet_id, *, expected, comments) -> bool:
        return self._swap(timesheet_id, expected, status=TimesheetStatus.REJECTED, comments=comments)


class FakeTimeEntryRepo:
    def __init__(self, users: FakeUserRepo, projects: FakeProjectRepo, timesheets: FakeTimesheetRepo):
        self._users = users
        self._projects = projects
        self._timesheets = timesheets
        self.entries: Dict[int, TimeEntry] = {}
        self._next_id = 1

    def _joined(self, entry: TimeEntry) -> TimeEntry:
        project = self._projects.get_by_id(entry.project_id)
        return replace(entry, project_code=project.code, project_name=project.name)

    def get_by_id(self, entry_id: int) -> Optional[TimeEntry]:
        entry = self.entries.get(int(entry_id))
        return self._joined(entry) if entry else None

    def get_for_user_project_date(self, *, user_id, project_id, entry_date) -> Optional[TimeEntry]:
        for e in self.entries.values():
            if e.user_id == user_id and e.project_id == project_id and e.entry_date == entry_date:
                return self._joined(e)
        return None

    def list_for_timesheets(self, timesheet_ids) -> Sequence[TimeEntry]:
        ids = set(timesheet_ids)
        out = [self._joined(e) for e in self.entries.values() if e.timesheet_id in ids]
        return sorted(out, key=lambda e: (e.project_id, e.entry_date))

    def create(self, *, timesheet_id, user_id, project_id, entry_date, hours, notes) -> int:
        if self.get_for_user_project_date(user_id=user_id, project_id=project_id, entry_date=entry_date):
            raise ConflictError("duplicate entry")
        entry = TimeEntry(
            entry_id=self._next_id,
            timesheet_id=timesheet_id,
            user_id=user_id,
            project_id=project_id,
            entry_date=entry_date,
            hours=hours,
            notes=notes,
        )
        self.entries[entry.entry_id] = entry
        self._next_id += 1
        return entry.entry_id

    def update(self, entry_id, *, hours, notes) -> bool:
        current = self.entries.get(int(entry_id))
        if current is None:
            return False
        self.entries[int(entry_id)] = replace(current, hours=hours, notes=notes)
        return True

    def delete(self, entry_id: int) -> bool:
        return self.entries.pop(int(entry_id), None) is not None

    def list_report_rows(self, *, start_date=None, end_date=None, project_id=None, user_id=None):
        rows = []
        for e in self.entries.values():
            if start_date is not None and e.entry_date < start_date:
                continue
            if end_date is not None and e.entry_date > end_date:
                continue
            if project_id is not None and e.project_id != project_id:
                continue
            if user_id is not None and e.user_id != user_id:
                continue
            user = self._users.get_by_id(e.user_id)
            manager = self._users.get_by_id(user.manager_id) if user.manager_id else None
            project = self._projects.get_by_id(e.project_id)
            ts = self._timesheets.get_by_id(e.timesheet_id)
            rows.append(
                EntryReportRow(
                    entry_id=e.entry_id,
                    entry_date=e.entry_date,
                    hours=e.hours,
                    notes=e.notes,
                    user_id=user.user_id,
                    first_name=user.first_name,
                    last_name=user.last_name,
                    email=user.email,
                    role=user.role,
                    manager_name=manager.display_name if manager else None,
                    project_id=project.project_id,
                    project_code=project.code,
                    project_name=project.name,
                    project_description=project.description,
                    project_active=project.active,
                    timesheet_id=ts.timesheet_id,
                    week_start_date=ts.week_start_date,
                    week_end_date=ts.week_end_date,
                    timesheet_status=ts.status,
                )
            )
        rows.sort(key=lambda r: (r.project_code, r.last_name, r.first_name, r.entry_date))
        return rows


class Store:
    """In-memory repositories plus a small demo org chart.

    admin, manager (reports: alice, bob), other_manager (report: carol).
    Projects: ALPHA, BETA (active) and OLD (inactive).
    """

    def __init__(self):
        self.users = FakeUserRepo()
        self.projects = FakeProjectRepo(self.users)
        self.timesheets = FakeTimesheetRepo()
        self.entries = FakeTimeEntryRepo(self.users, self.projects, self.timesheets)

        self.admin = self.users.add(email="admin@example.com", first_name="Ada", last_name="Admin", role=Role.ADMIN)
        self.manager = self.users.add(
            email="manager@example.com", first_name="Mia", last_name="Manager", role=Role.MANAGER
        )
        self.other_manager = self.users.add(
            email="other@example.com", first_name="Oscar", last_name="Other", role=Role.MANAGER
        )
        self.alice = self.users.add(
            email="alice@example.com",
            first_name="Alice",
            last_name="Zimmer",
            role=Role.EMPLOYEE,
            manager_id=self.manager.user_id,
        )
        self.bob = self.users.add(
            email="bob@example.com",
            first_name="Bob",
            last_name="Adams",
            role=Role.EMPLOYEE,
            manager_id=self.manager.user_id,
        )
        self.carol = self.users.add(
            email="carol@example.com",
            first_name="Carol",
            last_name="Chen",
            role=Role.EMPLOYEE,
            manager_id=self.other_manager.user_id,
        )

        self.alpha = self.projects.add("ALPHA", "Alpha")
        self.beta = self.projects.add("BETA", "Beta")
        self.old = self.projects.add("OLD", "Old", active=False)

    def actor(self, user: User) -> Actor:
        return Actor(user_id=user.user_id, role=user.role)


@pytest.fixture
def store() -> Store:
    return Store()


@pytest.fixture
def container(store: Store):
    return wire_services(
        users_repo=store.users,
        projects_repo=store.projects,
        timesheets_repo=store.timesheets,
        entries_repo=store.entries,
        clock=lambda: FIXED_NOW,
    )
