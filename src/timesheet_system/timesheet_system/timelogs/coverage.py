"""Duration reconciliation between an attendance record and its time logs.

Invariant: when an attendance record has both times, the sum of its time log
durations is at least the record's own duration. Callers pass the
*prospective* total (after the pending write) so violations surface before
commit.
"""

from __future__ import annotations

from typing import Optional

from ..common.time_utils import duration_minutes
from ..core.enums import AttendanceStatus, StatusKind, status_kind
from ..core.exceptions import NotFoundError
from ..core.results import RuleCode, RuleResult
from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from .repository import TimeLogRepository


def required_minutes(attendance: AttendanceRecord) -> int:
    if not attendance.has_times:
        return 0
    return duration_minutes(attendance.start_time, attendance.end_time)


def check_total(candidate_total: int, need: int) -> RuleResult:
    if candidate_total < need:
        return RuleResult.fail(
            RuleCode.INSUFFICIENT_COVERAGE,
            f"Total time logs ({candidate_total} min) cannot be less than attendance duration ({need} min)",
            have=candidate_total,
            need=need,
        )
    return RuleResult.ok()


def check_coverage(attendance: AttendanceRecord, candidate_total: int) -> RuleResult:
    if not attendance.has_times:
        return RuleResult.ok()
    return check_total(candidate_total, required_minutes(attendance))


def check_logs_before_status_change(
    old_status: AttendanceStatus,
    new_status: AttendanceStatus,
    log_count: int,
) -> RuleResult:
    """Logs must be removed before a work record turns into an exclusive status."""
    if old_status == new_status:
        return RuleResult.ok()
    if status_kind(old_status) is StatusKind.WORK and status_kind(new_status) is StatusKind.EXCLUSIVE and log_count > 0:
        return RuleResult.fail(
            RuleCode.LOGS_EXIST_CONFLICT,
            f"Cannot change to {new_status.value} status while time logs exist ({log_count} logs). "
            "Delete time logs first.",
            log_count=log_count,
        )
    return RuleResult.ok()


class CoverageCheck:
    """Coverage rule bound to the record-lookup collaborators.

    ``check_pending`` reads the parent record before summing its logs. Inside a
    transaction that read takes the parent row lock, so concurrent writes to
    sibling logs serialize on it and each one sums the committed state.
    """

    def __init__(self, attendance: AttendanceRepository, time_logs: TimeLogRepository):
        self._attendance = attendance
        self._time_logs = time_logs

    def _record(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def check(self, attendance_id: int, candidate_total: int) -> RuleResult:
        return check_coverage(self._record(attendance_id), candidate_total)

    def check_pending(
        self,
        attendance_id: int,
        *,
        exclude_log_id: Optional[int] = None,
        pending_minutes: int = 0,
    ) -> RuleResult:
        """Coverage with the persisted logs (minus ``exclude_log_id``) plus ``pending_minutes``."""
        record = self._record(attendance_id)
        others = self._time_logs.total_minutes(attendance_id, exclude_log_id=exclude_log_id)
        return check_coverage(record, others + pending_minutes)
