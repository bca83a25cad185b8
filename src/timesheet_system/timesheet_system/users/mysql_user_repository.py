from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_USER_COLUMNS = "id, name, mail, password_hash, role, active, created_at, updated_at"


def _to_user(row: dict[str, Any]) -> User:
    return User(
        user_id=int(row["id"]),
        name=row["name"],
        mail=row["mail"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        active=bool(row.get("active", True)),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_mail(self, mail: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE mail=%s", (mail,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_users(self, *, active: Optional[bool] = True, role: Optional[Role] = None) -> Sequence[User]:
        clauses: list[str] = []
        params: list[Any] = []
        if active is not None:
            clauses.append("active=%s")
            params.append(int(active))
        if role is not None:
            clauses.append("role=%s")
            params.append(role.value)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users {where} ORDER BY created_at DESC, id DESC", tuple(params))
            return [_to_user(r) for r in fetchall(cur)]

    def create_user(self, *, name: str, mail: str, password_hash: str, role: Role) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(name, mail, password_hash, role, active)
                VALUES(%s,%s,%s,%s,1)
                """,
                (name, mail, password_hash, role.value),
            )
            return int(cur.lastrowid)

    def update_user(self, user_id: int, *, name: str, mail: str, role: Role, active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET name=%s, mail=%s, role=%s, active=%s WHERE id=%s",
                (name, mail, role.value, int(active), int(user_id)),
            )
            return cur.rowcount > 0

    def set_active(self, user_id: int, *, active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET active=%s WHERE id=%s", (int(active), int(user_id)))
            return cur.rowcount > 0

    def set_password_hash(self, user_id: int, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET password_hash=%s WHERE id=%s", (password_hash, int(user_id)))
            return cur.rowcount > 0
