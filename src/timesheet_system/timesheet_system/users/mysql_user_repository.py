from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = "user_id, email, first_name, last_name, password_hash, role, manager_id"


def _to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=int(row["user_id"]),
        email=row["email"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        role=Role(row["role"]),
        manager_id=int(row["manager_id"]) if row.get("manager_id") is not None else None,
        password_hash=row.get("password_hash") or "",
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY last_name, first_name, user_id")
            return [_to_user(r) for r in fetchall(cur)]

    def list_direct_reports(self, manager_id: int, *, role: Optional[Role] = Role.EMPLOYEE) -> Sequence[User]:
        clauses = ["manager_id=%s"]
        params: list[object] = [int(manager_id)]
        if role is not None:
            clauses.append("role=%s")
            params.append(role.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM users
                WHERE {" AND ".join(clauses)}
                ORDER BY last_name, first_name, user_id
                """,
                tuple(params),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def create_user(
        self,
        *,
        email: str,
        first_name: str,
        last_name: str,
        password_hash: str,
        role: Role,
        manager_id: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(email, first_name, last_name, password_hash, role, manager_id)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (email, first_name, last_name, password_hash, role.value, manager_id),
            )
            return int(cur.lastrowid)

    def update_user(
        self,
        user_id: int,
        *,
        email: str,
        first_name: str,
        last_name: str,
        role: Role,
        manager_id: Optional[int],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET email=%s, first_name=%s, last_name=%s, role=%s, manager_id=%s
                WHERE user_id=%s
                """,
                (email, first_name, last_name, role.value, manager_id, int(user_id)),
            )
            return cur.rowcount > 0

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (int(user_id),))
            return cur.rowcount > 0
