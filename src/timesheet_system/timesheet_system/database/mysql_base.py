from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    pinned = conn_factory.current()
    if pinned is not None:
        # The enclosing transaction owns commit/rollback.
        cur = pinned.cursor(dictionary=dictionary)
        try:
            yield pinned, cur
        finally:
            cur.close()
        return

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def lock_clause(conn_factory: DatabaseConnection) -> str:
    """Row locks only make sense inside an explicit transaction."""
    return " FOR UPDATE" if conn_factory.current() is not None else ""


def placeholders(values) -> str:
    return ",".join(["%s"] * len(values))
