from __future__ import annotations

import logging
from contextlib import nullcontext
from typing import Any, Callable, ContextManager, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.time_utils import format_time
from ..core.enums import LocationStatus
from ..core.exceptions import NotFoundError
from ..projects.repository import ProjectRepository
from .coverage import CoverageCheck, check_coverage, required_minutes
from .entries import LogInput, resolve_fields, resolve_log
from .model import TimeLog
from .repository import TimeLogRepository

logger = logging.getLogger(__name__)

UNSET: Any = object()


class TimeLogService:
    """Time log writes, each guarded by the coverage invariant of its parent record.

    Coverage is evaluated with the prospective total, i.e. the sum of the
    sibling logs after the pending write. Creation only reports coverage; it
    never lowers the total.
    """

    def __init__(
        self,
        time_logs: TimeLogRepository,
        attendance: AttendanceRepository,
        projects: ProjectRepository,
        *,
        transaction: Optional[Callable[[], ContextManager[Any]]] = None,
    ):
        self._time_logs = time_logs
        self._attendance = attendance
        self._projects = projects
        self._coverage = CoverageCheck(attendance, time_logs)
        self._transaction = transaction or nullcontext

    def _attendance_or_404(self, attendance_id: int):
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def get(self, log_id: int) -> TimeLog:
        log = self._time_logs.get_by_id(log_id)
        if not log:
            raise NotFoundError("Time log not found")
        return log

    def create(self, attendance_id: int, entry: LogInput) -> dict:
        """Insert one log; returns its id and the record's coverage after the write."""

        with self._transaction():
            record = self._attendance_or_404(attendance_id)
            resolved = resolve_log(self._projects, entry)

            log_id = self._time_logs.create(
                attendance_id=attendance_id,
                task_id=resolved.task_id,
                duration_min=resolved.duration_min,
                start_time=resolved.start_time,
                end_time=resolved.end_time,
                location=resolved.location,
                description=resolved.description,
            )
            total = self._time_logs.total_minutes(attendance_id)

        need = required_minutes(record)
        return {
            "id": log_id,
            "coverage": {"have": total, "need": need, "covered": check_coverage(record, total).is_ok},
        }

    def list_for_attendance(self, attendance_id: int) -> Sequence[TimeLog]:
        self._attendance_or_404(attendance_id)
        return self._time_logs.list_for_attendance(attendance_id)

    def update(
        self,
        log_id: int,
        *,
        task_id: Any = UNSET,
        duration: Any = UNSET,
        start_time: Any = UNSET,
        end_time: Any = UNSET,
        location: Any = UNSET,
        description: Any = UNSET,
    ) -> TimeLog:
        """Partial update; the task's reporting type decides which fields are used."""

        with self._transaction():
            existing = self.get(log_id)

            new_task_id = existing.task_id if task_id is UNSET else int(task_id)
            task = self._projects.get_task_context(new_task_id)
            if not task:
                raise NotFoundError("Task not found")

            duration_min, start, end = resolve_fields(
                task,
                duration=existing.duration_min if duration is UNSET else duration,
                start_time=_text_or_existing(start_time, existing.start_time),
                end_time=_text_or_existing(end_time, existing.end_time),
            )

            self._coverage.check_pending(
                existing.attendance_id, exclude_log_id=log_id, pending_minutes=duration_min
            ).raise_for_violation()

            updated = TimeLog(
                log_id=existing.log_id,
                attendance_id=existing.attendance_id,
                task_id=new_task_id,
                duration_min=duration_min,
                start_time=start,
                end_time=end,
                location=existing.location if location is UNSET else LocationStatus(location),
                description=existing.description if description is UNSET else (description or None),
                created_at=existing.created_at,
            )
            self._time_logs.update(
                log_id=log_id,
                task_id=updated.task_id,
                duration_min=updated.duration_min,
                start_time=updated.start_time,
                end_time=updated.end_time,
                location=updated.location,
                description=updated.description,
            )

        return updated

    def delete(self, log_id: int) -> TimeLog:
        with self._transaction():
            existing = self.get(log_id)
            self._coverage.check_pending(existing.attendance_id, exclude_log_id=log_id).raise_for_violation()
            self._time_logs.delete(log_id)

        logger.debug("Time log %s deleted from attendance %s", log_id, existing.attendance_id)
        return existing


def _text_or_existing(value: Any, current) -> Optional[str]:
    if value is UNSET:
        return format_time(current) if current is not None else None
    return value
