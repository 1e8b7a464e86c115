from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .common.datetime_utils import now_local
from .database.connection import DBConfig, DatabaseConnection
from .entries.mysql_time_entry_repository import MySQLTimeEntryRepository
from .entries.repository import TimeEntryRepository
from .entries.service import TimeEntryService
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.repository import ProjectRepository
from .projects.service import ProjectService
from .reports.service import ReportService
from .timesheets.mysql_timesheet_repository import MySQLTimesheetRepository
from .timesheets.repository import TimesheetRepository
from .timesheets.service import TimesheetService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import ActorResolver, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    projects_repo: ProjectRepository
    timesheets_repo: TimesheetRepository
    entries_repo: TimeEntryRepository

    actor_resolver: ActorResolver
    user_service: UserService
    project_service: ProjectService
    timesheet_service: TimesheetService
    entry_service: TimeEntryService
    report_service: ReportService


def wire_services(
    *,
    users_repo: UserRepository,
    projects_repo: ProjectRepository,
    timesheets_repo: TimesheetRepository,
    entries_repo: TimeEntryRepository,
    conn: Optional[DatabaseConnection] = None,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    """Build every service on top of the given repositories."""

    return Container(
        conn=conn,
        users_repo=users_repo,
        projects_repo=projects_repo,
        timesheets_repo=timesheets_repo,
        entries_repo=entries_repo,
        actor_resolver=ActorResolver(users_repo),
        user_service=UserService(users_repo),
        project_service=ProjectService(projects_repo, users_repo, today=lambda: clock().date()),
        timesheet_service=TimesheetService(timesheets_repo, entries_repo, users_repo, clock=clock),
        entry_service=TimeEntryService(entries_repo, timesheets_repo, projects_repo),
        report_service=ReportService(entries_repo, timesheets_repo, users_repo, clock=clock),
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    return wire_services(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        projects_repo=MySQLProjectRepository(conn),
        timesheets_repo=MySQLTimesheetRepository(conn),
        entries_repo=MySQLTimeEntryRepository(conn),
    )
