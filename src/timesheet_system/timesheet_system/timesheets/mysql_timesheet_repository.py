from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import TimesheetStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, to_date
from .model import Timesheet
from .repository import TimesheetRepository

_COLUMNS = (
    "timesheet_id, user_id, week_start_date, week_end_date, status, "
    "submitted_at, approved_at, approver_id, comments"
)


def _to_timesheet(row: Dict[str, Any]) -> Timesheet:
    return Timesheet(
        timesheet_id=int(row["timesheet_id"]),
        user_id=int(row["user_id"]),
        week_start_date=to_date(row["week_start_date"]),
        week_end_date=to_date(row["week_end_date"]),
        status=TimesheetStatus(row["status"]),
        submitted_at=row.get("submitted_at"),
        approved_at=row.get("approved_at"),
        approver_id=int(row["approver_id"]) if row.get("approver_id") is not None else None,
        comments=row.get("comments"),
    )


class MySQLTimesheetRepository(TimesheetRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, timesheet_id: int) -> Optional[Timesheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM timesheets WHERE timesheet_id=%s", (int(timesheet_id),))
            row = fetchone(cur)
            return _to_timesheet(row) if row else None

    def get_for_user_and_week(self, user_id: int, week_start: date) -> Optional[Timesheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM timesheets WHERE user_id=%s AND week_start_date=%s",
                (int(user_id), week_start),
            )
            row = fetchone(cur)
            return _to_timesheet(row) if row else None

    def create(self, *, user_id: int, week_start: date, week_end: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO timesheets(user_id, week_start_date, week_end_date, status)
                VALUES(%s,%s,%s,%s)
                """,
                (int(user_id), week_start, week_end, TimesheetStatus.DRAFT.value),
            )
            return int(cur.lastrowid)

    def list_for_users(
        self,
        user_ids: Sequence[int],
        *,
        status: Optional[TimesheetStatus] = None,
        since: Optional[date] = None,
        until: Optional[date] = None,
    ) -> Sequence[Timesheet]:
        ids = [int(i) for i in user_ids]
        if not ids:
            return []

        clauses = [f"user_id IN ({in_clause(ids)})"]
        params: list[object] = list(ids)
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if since is not None:
            clauses.append("week_start_date >= %s")
            params.append(since)
        if until is not None:
            clauses.append("week_start_date <= %s")
            params.append(until)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM timesheets
                WHERE {" AND ".join(clauses)}
                ORDER BY submitted_at IS NULL, submitted_at, week_start_date, timesheet_id
                """,
                tuple(params),
            )
            return [_to_timesheet(r) for r in fetchall(cur)]

    def mark_submitted(self, timesheet_id: int, *, expected: TimesheetStatus, submitted_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE timesheets
                SET status=%s, submitted_at=%s
                WHERE timesheet_id=%s AND status=%s
                """,
                (TimesheetStatus.SUBMITTED.value, submitted_at, int(timesheet_id), expected.value),
            )
            return cur.rowcount > 0

    def mark_approved(
        self,
        timesheet_id: int,
        *,
        expected: TimesheetStatus,
        approved_at: datetime,
        approver_id: int,
        comments: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE timesheets
                SET status=%s, approved_at=%s, approver_id=%s, comments=%s
                WHERE timesheet_id=%s AND status=%s
                """,
                (
                    TimesheetStatus.APPROVED.value,
                    approved_at,
                    int(approver_id),
                    comments,
                    int(timesheet_id),
                    expected.value,
                ),
            )
            return cur.rowcount > 0

    def mark_rejected(self, timesheet_id: int, *, expected: TimesheetStatus, comments: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE timesheets
                SET status=%s, comments=%s
                WHERE timesheet_id=%s AND status=%s
                """,
                (TimesheetStatus.REJECTED.value, comments, int(timesheet_id), expected.value),
            )
            return cur.rowcount > 0
