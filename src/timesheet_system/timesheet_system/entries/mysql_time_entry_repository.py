from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import Role, TimesheetStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, to_date, to_hours
from .model import EntryReportRow, TimeEntry
from .repository import TimeEntryRepository

_ENTRY_SELECT = """
    SELECT e.entry_id, e.timesheet_id, e.user_id, e.project_id, e.entry_date, e.hours, e.notes,
           p.code AS project_code, p.name AS project_name
    FROM time_entries e
    JOIN projects p ON p.project_id = e.project_id
"""


def _to_entry(row: Dict[str, Any]) -> TimeEntry:
    return TimeEntry(
        entry_id=int(row["entry_id"]),
        timesheet_id=int(row["timesheet_id"]),
        user_id=int(row["user_id"]),
        project_id=int(row["project_id"]),
        entry_date=to_date(row["entry_date"]),
        hours=to_hours(row["hours"]),
        notes=row.get("notes"),
        project_code=row.get("project_code"),
        project_name=row.get("project_name"),
    )


class MySQLTimeEntryRepository(TimeEntryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, entry_id: int) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_ENTRY_SELECT + " WHERE e.entry_id=%s", (int(entry_id),))
            row = fetchone(cur)
            return _to_entry(row) if row else None

    def get_for_user_project_date(self, *, user_id: int, project_id: int, entry_date: date) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _ENTRY_SELECT + " WHERE e.user_id=%s AND e.project_id=%s AND e.entry_date=%s",
                (int(user_id), int(project_id), entry_date),
            )
            row = fetchone(cur)
            return _to_entry(row) if row else None

    def list_for_timesheets(self, timesheet_ids: Sequence[int]) -> Sequence[TimeEntry]:
        ids = [int(i) for i in timesheet_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _ENTRY_SELECT + f" WHERE e.timesheet_id IN ({in_clause(ids)}) ORDER BY e.project_id, e.entry_date",
                tuple(ids),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        timesheet_id: int,
        user_id: int,
        project_id: int,
        entry_date: date,
        hours: float,
        notes: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO time_entries(timesheet_id, user_id, project_id, entry_date, hours, notes)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(timesheet_id), int(user_id), int(project_id), entry_date, hours, notes),
            )
            return int(cur.lastrowid)

    def update(self, entry_id: int, *, hours: float, notes: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE time_entries SET hours=%s, notes=%s WHERE entry_id=%s",
                (hours, notes, int(entry_id)),
            )
            return cur.rowcount > 0

    def delete(self, entry_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM time_entries WHERE entry_id=%s", (int(entry_id),))
            return cur.rowcount > 0

    def list_report_rows(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        project_id: Optional[int] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[EntryReportRow]:
        clauses = ["1=1"]
        params: list[object] = []

        if start_date is not None:
            clauses.append("e.entry_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("e.entry_date <= %s")
            params.append(end_date)
        if project_id is not None:
            clauses.append("e.project_id=%s")
            params.append(int(project_id))
        if user_id is not None:
            clauses.append("e.user_id=%s")
            params.append(int(user_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT e.entry_id, e.entry_date, e.hours, e.notes,
                       u.user_id, u.first_name, u.last_name, u.email, u.role,
                       m.first_name AS manager_first_name, m.last_name AS manager_last_name,
                       p.project_id, p.code, p.name, p.description, p.active,
                       t.timesheet_id, t.week_start_date, t.week_end_date, t.status
                FROM time_entries e
                JOIN users u ON u.user_id = e.user_id
                LEFT JOIN users m ON m.user_id = u.manager_id
                JOIN projects p ON p.project_id = e.project_id
                JOIN timesheets t ON t.timesheet_id = e.timesheet_id
                WHERE {where}
                ORDER BY p.code, u.last_name, u.first_name, e.entry_date
                """,
                tuple(params),
            )
            out: list[EntryReportRow] = []
            for r in fetchall(cur):
                manager_name = None
                if r.get("manager_first_name") is not None:
                    manager_name = f"{r['manager_first_name']} {r['manager_last_name']}"
                out.append(
                    EntryReportRow(
                        entry_id=int(r["entry_id"]),
                        entry_date=to_date(r["entry_date"]),
                        hours=to_hours(r["hours"]),
                        notes=r.get("notes"),
                        user_id=int(r["user_id"]),
                        first_name=r["first_name"],
                        last_name=r["last_name"],
                        email=r["email"],
                        role=Role(r["role"]),
                        manager_name=manager_name,
                        project_id=int(r["project_id"]),
                        project_code=r["code"],
                        project_name=r["name"],
                        project_description=r.get("description"),
                        project_active=bool(r["active"]),
                        timesheet_id=int(r["timesheet_id"]),
                        week_start_date=to_date(r["week_start_date"]),
                        week_end_date=to_date(r["week_end_date"]),
                        timesheet_status=TimesheetStatus(r["status"]),
                    )
                )
            return out
