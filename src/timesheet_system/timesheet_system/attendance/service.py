from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import replace
from datetime import date
from typing import Any, Callable, ContextManager, Optional, Sequence

from ..common.datetime_utils import month_bounds, today
from ..common.time_utils import duration_minutes, parse_time
from ..core.enums import AttendanceStatus, StatusKind, is_non_work, status_kind
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.results import RuleCode, RuleResult
from ..projects.repository import ProjectRepository
from ..timelogs.coverage import check_logs_before_status_change, check_total
from ..timelogs.entries import LogInput, resolve_log
from ..timelogs.repository import TimeLogRepository
from .model import AttendanceHistoryEntry, AttendanceRecord
from .repository import AttendanceRepository
from .rules import AttendanceRules, check_time_range

logger = logging.getLogger(__name__)

UNSET: Any = object()


def _optional_time(text: Optional[str]):
    return parse_time(text) if text else None


class AttendanceService:
    """Use cases for daily attendance records.

    Every read-validate-write sequence runs inside one ``transaction()`` block
    so sibling reads and the write see the same snapshot.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        time_logs: TimeLogRepository,
        projects: ProjectRepository,
        *,
        transaction: Optional[Callable[[], ContextManager[Any]]] = None,
    ):
        self._attendance = attendance
        self._time_logs = time_logs
        self._projects = projects
        self._rules = AttendanceRules(attendance)
        self._transaction = transaction or nullcontext

    def create(
        self,
        *,
        user_id: int,
        work_date: date,
        start_time: Optional[str],
        end_time: Optional[str],
        status: AttendanceStatus,
    ) -> int:
        start, end = _optional_time(start_time), _optional_time(end_time)

        with self._transaction():
            self._rules.validate(
                user_id=user_id,
                work_date=work_date,
                start=start,
                end=end,
                status=status,
            ).raise_for_violation()

            return self._attendance.create(
                user_id=user_id,
                work_date=work_date,
                start_time=start,
                end_time=end,
                status=status,
            )

    def create_combined(
        self,
        *,
        user_id: int,
        work_date: date,
        start_time: str,
        end_time: str,
        time_logs: Sequence[LogInput],
    ) -> dict:
        """Create a work record and its time logs all-or-nothing."""
        if not time_logs:
            raise ValidationError("At least one time log is required")

        start, end = parse_time(start_time), parse_time(end_time)
        check_time_range(start, end).raise_for_violation()
        need = duration_minutes(start, end)

        with self._transaction():
            self._rules.validate(
                user_id=user_id,
                work_date=work_date,
                start=start,
                end=end,
                status=AttendanceStatus.WORK,
            ).raise_for_violation()

            resolved = [
                resolve_log(self._projects, entry, prefix=f"Time log #{i}: ")
                for i, entry in enumerate(time_logs, start=1)
            ]
            check_total(sum(r.duration_min for r in resolved), need).raise_for_violation()

            attendance_id = self._attendance.create(
                user_id=user_id,
                work_date=work_date,
                start_time=start,
                end_time=end,
                status=AttendanceStatus.WORK,
            )
            log_ids = [
                self._time_logs.create(
                    attendance_id=attendance_id,
                    task_id=r.task_id,
                    duration_min=r.duration_min,
                    start_time=r.start_time,
                    end_time=r.end_time,
                    location=r.location,
                    description=r.description,
                )
                for r in resolved
            ]

        logger.debug("Combined attendance %s created with %d logs", attendance_id, len(log_ids))
        return {"attendanceId": attendance_id, "timeLogIds": log_ids}

    def update(
        self,
        attendance_id: int,
        *,
        start_time: Any = UNSET,
        end_time: Any = UNSET,
        status: Any = UNSET,
    ) -> AttendanceRecord:
        """Apply a partial update; omitted fields keep their stored values.

        The date is immutable. Times are cleared for every non-work status.
        """

        with self._transaction():
            existing = self.get(attendance_id)

            old_status = existing.status
            new_status = old_status if status is UNSET or status is None else AttendanceStatus(status)

            if new_status != old_status:
                log_count = self._time_logs.count_for_attendance(attendance_id)
                check_logs_before_status_change(old_status, new_status, log_count).raise_for_violation()

                entering_work = status_kind(old_status) is not StatusKind.WORK and status_kind(new_status) is StatusKind.WORK
                if entering_work and (start_time in (UNSET, None, "") or end_time in (UNSET, None, "")):
                    RuleResult.fail(
                        RuleCode.MISSING_TIMES,
                        "Start time and end time are required when changing to work status",
                    ).raise_for_violation()

            start = existing.start_time if start_time is UNSET else _optional_time(start_time)
            end = existing.end_time if end_time is UNSET else _optional_time(end_time)
            if is_non_work(new_status):
                start, end = None, None

            self._rules.validate(
                user_id=existing.user_id,
                work_date=existing.work_date,
                start=start,
                end=end,
                status=new_status,
                exclude_id=attendance_id,
            ).raise_for_violation()

            times_changed = start_time is not UNSET or end_time is not UNSET
            stays_work = old_status is AttendanceStatus.WORK and new_status is AttendanceStatus.WORK
            if times_changed and stays_work and start is not None and end is not None:
                total = self._time_logs.total_minutes(attendance_id)
                check_total(total, duration_minutes(start, end)).raise_for_violation()

            self._attendance.update(attendance_id=attendance_id, start_time=start, end_time=end, status=new_status)

        return replace(existing, start_time=start, end_time=end, status=new_status)

    def get(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def ensure_owner(self, attendance_id: int, user_id: int) -> AttendanceRecord:
        record = self.get(attendance_id)
        if record.user_id != int(user_id):
            raise AuthorizationError("Access denied")
        return record

    def month_history(self, user_id: int, month: int, *, year: Optional[int] = None) -> list[AttendanceHistoryEntry]:
        if not 1 <= int(month) <= 12:
            raise ValidationError("Month must be between 1 and 12")

        start, end = month_bounds(year or today().year, int(month))
        records = self._attendance.list_for_user_between(user_id, start, end)

        details = self._time_logs.list_details_for_attendances([r.attendance_id for r in records])
        by_attendance: dict[int, list] = {}
        for d in details:
            by_attendance.setdefault(d.log.attendance_id, []).append(d)

        return [AttendanceHistoryEntry(record=r, time_logs=by_attendance.get(r.attendance_id, [])) for r in records]
