from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_date
from .model import AssignmentRow, Project, ProjectAssignment
from .repository import ProjectRepository

_COLUMNS = "p.project_id, p.code, p.name, p.description, p.active"


def _to_project(row: Dict[str, Any]) -> Project:
    return Project(
        project_id=int(row["project_id"]),
        code=row["code"],
        name=row["name"],
        description=row.get("description"),
        active=bool(row.get("active", True)),
    )


def _to_assignment(row: Dict[str, Any]) -> ProjectAssignment:
    return ProjectAssignment(
        assignment_id=int(row["assignment_id"]),
        user_id=int(row["user_id"]),
        project_id=int(row["project_id"]),
        start_date=to_date(row["start_date"]),
        end_date=to_date(row.get("end_date")),
    )


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, project_id: int) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM projects p WHERE p.project_id=%s", (int(project_id),))
            row = fetchone(cur)
            return _to_project(row) if row else None

    def get_by_code(self, code: str) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM projects p WHERE p.code=%s", (code,))
            row = fetchone(cur)
            return _to_project(row) if row else None

    def list_projects(self, *, active_only: bool = True) -> Sequence[Project]:
        where = "WHERE p.active=1" if active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM projects p {where} ORDER BY p.code")
            return [_to_project(r) for r in fetchall(cur)]

    def list_assigned(self, user_id: int, *, today: date) -> Sequence[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM projects p
                JOIN project_assignments a ON a.project_id = p.project_id
                WHERE a.user_id=%s
                  AND p.active=1
                  AND (a.end_date IS NULL OR a.end_date >= %s)
                ORDER BY p.code
                """,
                (int(user_id), today),
            )
            return [_to_project(r) for r in fetchall(cur)]

    def create_project(self, *, code: str, name: str, description: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO projects(code, name, description, active) VALUES(%s,%s,%s,1)",
                (code, name, description),
            )
            return int(cur.lastrowid)

    def update_project(
        self,
        project_id: int,
        *,
        code: str,
        name: str,
        description: Optional[str],
        active: bool,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE projects
                SET code=%s, name=%s, description=%s, active=%s
                WHERE project_id=%s
                """,
                (code, name, description, 1 if active else 0, int(project_id)),
            )
            return cur.rowcount > 0

    def get_assignment(self, *, user_id: int, project_id: int) -> Optional[ProjectAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT assignment_id, user_id, project_id, start_date, end_date
                FROM project_assignments
                WHERE user_id=%s AND project_id=%s
                """,
                (int(user_id), int(project_id)),
            )
            row = fetchone(cur)
            return _to_assignment(row) if row else None

    def list_assignments(self) -> Sequence[AssignmentRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.assignment_id, a.user_id, a.project_id, a.start_date, a.end_date,
                       u.first_name, u.last_name, u.email,
                       p.code, p.name, p.active
                FROM project_assignments a
                JOIN users u ON u.user_id = a.user_id
                JOIN projects p ON p.project_id = a.project_id
                ORDER BY u.last_name, u.first_name, p.code
                """
            )
            return [
                AssignmentRow(
                    assignment=_to_assignment(r),
                    user_name=f"{r['first_name']} {r['last_name']}",
                    user_email=r["email"],
                    project_code=r["code"],
                    project_name=r["name"],
                    project_active=bool(r["active"]),
                )
                for r in fetchall(cur)
            ]

    def create_assignment(
        self,
        *,
        user_id: int,
        project_id: int,
        start_date: date,
        end_date: Optional[date],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO project_assignments(user_id, project_id, start_date, end_date)
                VALUES(%s,%s,%s,%s)
                """,
                (int(user_id), int(project_id), start_date, end_date),
            )
            return int(cur.lastrowid)

    def delete_assignment(self, *, user_id: int, project_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM project_assignments WHERE user_id=%s AND project_id=%s",
                (int(user_id), int(project_id)),
            )
            return cur.rowcount > 0
