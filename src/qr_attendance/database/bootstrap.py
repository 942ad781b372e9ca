from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List

from .connection import DatabaseConnection
from .mysql_base import db_cursor

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"


def iter_sql_statements(sql: str) -> Iterable[str]:
    # Bundled schema has no ';' inside literals, so a plain split is enough.
    for chunk in sql.split(";"):
        lines = [ln for ln in chunk.splitlines() if not ln.strip().startswith("--")]
        stmt = "\n".join(lines).strip()
        if stmt:
            yield stmt


def apply_schema(conn_factory: DatabaseConnection, *, schema_path: Path = SCHEMA_PATH) -> List[str]:
    """Apply CREATE TABLE IF NOT EXISTS statements. Idempotent."""

    sql = schema_path.read_text(encoding="utf-8")
    statements = list(iter_sql_statements(sql))
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        for stmt in statements:
            cur.execute(stmt)
    logger.info("schema applied from %s (%d statements)", schema_path.name, len(statements))
    return statements


DEMO_STUDENTS = (
    ("00000000-0000-0000-0000-000000000001", "2021-00001", "Demo Student One", "1st Year"),
    ("00000000-0000-0000-0000-000000000002", "2021-00002", "Demo Student Two", "2nd Year"),
)


def ensure_demo_students(conn_factory: DatabaseConnection) -> int:
    """Insert demo students if missing. Returns number of rows added."""

    added = 0
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        for student_id, school_id, full_name, year_level in DEMO_STUDENTS:
            cur.execute(
                """
                INSERT IGNORE INTO students(id, school_id, full_name, year_level)
                VALUES(%s,%s,%s,%s)
                """,
                (student_id, school_id, full_name, year_level),
            )
            added += max(cur.rowcount, 0)
    logger.info("demo students ensured (%d added)", added)
    return added


def list_tables(conn_factory: DatabaseConnection) -> List[str]:
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        cur.execute("SHOW TABLES")
        return [str(row[0]) for row in cur.fetchall()]
