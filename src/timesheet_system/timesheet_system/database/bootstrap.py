from __future__ import annotations

import logging
import re
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)


def _connect(config: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=config.host, port=config.port, user=config.user, password=config.password, use_pure=True)
    if with_database:
        kwargs["database"] = config.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # The target database comes from DB_CONFIG, not from the file.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a SQL script on ``;`` outside quoted strings."""
    buf: list[str] = []
    quote: Optional[str] = None
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue
        if ch == "\\":
            buf.append(ch)
            escape = True
            continue
        if ch in ("'", '"'):
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
            buf.append(ch)
            continue
        if ch == ";" and quote is None:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue
        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_script(db_config: dict, path: str | Path) -> None:
    config = DBConfig.from_dict(db_config)
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))

    conn = _connect(config)
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    config = DBConfig.from_dict(db_config)
    conn = _connect(config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    _run_script(db_config, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _run_script(db_config, seed_path)


# (email, first, last, password, role, manager email)
DEMO_USERS = (
    ("admin@example.com", "Ada", "Admin", "admin123", "ADMIN", None),
    ("manager@example.com", "Mia", "Manager", "manager123", "MANAGER", None),
    ("employee@example.com", "Eli", "Employee", "employee123", "EMPLOYEE", "manager@example.com"),
)


def ensure_demo_users(db_config: dict) -> None:
    """Upsert the demo admin, manager and employee, and assign the employee to active projects."""
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor(dictionary=True)

        def user_id_for(email: str) -> Optional[int]:
            cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
            row = cur.fetchone()
            return int(row["user_id"]) if row else None

        for email, first_name, last_name, password, role, manager_email in DEMO_USERS:
            manager_id = user_id_for(manager_email) if manager_email else None
            password_hash = generate_password_hash(password)
            if user_id_for(email) is not None:
                cur.execute(
                    """
                    UPDATE users
                    SET first_name=%s, last_name=%s, password_hash=%s, role=%s, manager_id=%s
                    WHERE email=%s
                    """,
                    (first_name, last_name, password_hash, role, manager_id, email),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO users (email, first_name, last_name, password_hash, role, manager_id)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    """,
                    (email, first_name, last_name, password_hash, role, manager_id),
                )

        employee_id = user_id_for("employee@example.com")
        cur.execute(
            """
            INSERT IGNORE INTO project_assignments (user_id, project_id, start_date)
            SELECT %s, project_id, %s FROM projects WHERE active=1
            """,
            (employee_id, date.today()),
        )

        conn.commit()
        logger.info("demo users ready: %s", ", ".join(u[0] for u in DEMO_USERS))
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
