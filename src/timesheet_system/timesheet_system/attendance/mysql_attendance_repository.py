from __future__ import annotations

from datetime import date, time
from typing import Any, Optional, Sequence

from ..common.time_utils import to_time_of_day
from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, lock_clause
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "id, user_id, work_date, start_time, end_time, status, created_at, updated_at"


def _to_record(r: dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        start_time=to_time_of_day(r.get("start_time")),
        end_time=to_time_of_day(r.get("end_time")),
        status=AttendanceStatus(r["status"]),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM daily_attendance WHERE id=%s" + lock_clause(self._conn_factory),
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_user_and_date(
        self,
        user_id: int,
        work_date: date,
        *,
        exclude_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        sql = f"SELECT {_COLUMNS} FROM daily_attendance WHERE user_id=%s AND work_date=%s"
        params: list[object] = [int(user_id), work_date]
        if exclude_id is not None:
            sql += " AND id<>%s"
            params.append(int(exclude_id))
        sql += " ORDER BY start_time" + lock_clause(self._conn_factory)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_user_between(self, user_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM daily_attendance
                WHERE user_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date DESC, start_time ASC
                """,
                (int(user_id), start, end),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        user_id: int,
        work_date: date,
        start_time: Optional[time],
        end_time: Optional[time],
        status: AttendanceStatus,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO daily_attendance(user_id, work_date, start_time, end_time, status)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(user_id), work_date, start_time, end_time, status.value),
            )
            return int(cur.lastrowid)

    def update(
        self,
        *,
        attendance_id: int,
        start_time: Optional[time],
        end_time: Optional[time],
        status: AttendanceStatus,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE daily_attendance
                SET start_time=%s, end_time=%s, status=%s
                WHERE id=%s
                """,
                (start_time, end_time, status.value, int(attendance_id)),
            )
            return cur.rowcount > 0
