from __future__ import annotations

from datetime import time
from typing import Any, Optional, Sequence

from ..common.time_utils import to_time_of_day
from ..core.enums import LocationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, lock_clause, placeholders
from .model import TimeLog, TimeLogDetail
from .repository import TimeLogRepository

_COLUMNS = (
    "tl.id, tl.daily_attendance_id, tl.task_id, tl.duration_min, tl.start_time, tl.end_time, "
    "tl.location, tl.description, tl.created_at, tl.updated_at"
)


def _to_log(r: dict[str, Any]) -> TimeLog:
    return TimeLog(
        log_id=int(r["id"]),
        attendance_id=int(r["daily_attendance_id"]),
        task_id=int(r["task_id"]),
        duration_min=int(r["duration_min"]),
        start_time=to_time_of_day(r.get("start_time")),
        end_time=to_time_of_day(r.get("end_time")),
        location=LocationStatus(r["location"]),
        description=r.get("description"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLTimeLogRepository(TimeLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, log_id: int) -> Optional[TimeLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM project_time_logs tl WHERE tl.id=%s" + lock_clause(self._conn_factory),
                (int(log_id),),
            )
            r = fetchone(cur)
            return _to_log(r) if r else None

    def list_for_attendance(self, attendance_id: int) -> Sequence[TimeLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM project_time_logs tl
                WHERE tl.daily_attendance_id=%s
                ORDER BY tl.created_at ASC, tl.id ASC
                """,
                (int(attendance_id),),
            )
            return [_to_log(r) for r in fetchall(cur)]

    def count_for_attendance(self, attendance_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM project_time_logs WHERE daily_attendance_id=%s" + lock_clause(self._conn_factory),
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def total_minutes(self, attendance_id: int, *, exclude_log_id: Optional[int] = None) -> int:
        sql = "SELECT COALESCE(SUM(duration_min), 0) AS total FROM project_time_logs WHERE daily_attendance_id=%s"
        params: list[object] = [int(attendance_id)]
        if exclude_log_id is not None:
            sql += " AND id<>%s"
            params.append(int(exclude_log_id))
        sql += lock_clause(self._conn_factory)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def list_details_for_attendances(self, attendance_ids: Sequence[int]) -> Sequence[TimeLogDetail]:
        if not attendance_ids:
            return []

        ids = [int(i) for i in attendance_ids]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS},
                    t.name AS task_name,
                    p.id AS project_id, p.name AS project_name,
                    c.id AS client_id, c.name AS client_name
                FROM project_time_logs tl
                JOIN tasks t ON t.id = tl.task_id
                JOIN projects p ON p.id = t.project_id
                JOIN clients c ON c.id = p.client_id
                WHERE tl.daily_attendance_id IN ({placeholders(ids)})
                ORDER BY tl.created_at ASC, tl.id ASC
                """,
                tuple(ids),
            )
            return [
                TimeLogDetail(
                    log=_to_log(r),
                    task_name=r["task_name"],
                    project_id=int(r["project_id"]),
                    project_name=r["project_name"],
                    client_id=int(r["client_id"]),
                    client_name=r["client_name"],
                )
                for r in fetchall(cur)
            ]

    def usage_counts_for_user(self, user_id: int) -> dict[int, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT tl.task_id, COUNT(*) AS n
                FROM project_time_logs tl
                JOIN daily_attendance da ON da.id = tl.daily_attendance_id
                WHERE da.user_id=%s
                GROUP BY tl.task_id
                """,
                (int(user_id),),
            )
            return {int(r["task_id"]): int(r["n"]) for r in fetchall(cur)}

    def create(
        self,
        *,
        attendance_id: int,
        task_id: int,
        duration_min: int,
        start_time: Optional[time],
        end_time: Optional[time],
        location: LocationStatus,
        description: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO project_time_logs
                    (daily_attendance_id, task_id, duration_min, start_time, end_time, location, description)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(attendance_id), int(task_id), int(duration_min), start_time, end_time, location.value, description),
            )
            return int(cur.lastrowid)

    def update(
        self,
        *,
        log_id: int,
        task_id: int,
        duration_min: int,
        start_time: Optional[time],
        end_time: Optional[time],
        location: LocationStatus,
        description: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE project_time_logs
                SET task_id=%s, duration_min=%s, start_time=%s, end_time=%s, location=%s, description=%s
                WHERE id=%s
                """,
                (int(task_id), int(duration_min), start_time, end_time, location.value, description, int(log_id)),
            )
            return cur.rowcount > 0

    def delete(self, log_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM project_time_logs WHERE id=%s", (int(log_id),))
            return cur.rowcount > 0
