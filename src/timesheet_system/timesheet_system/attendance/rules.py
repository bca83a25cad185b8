"""Admissibility rules for attendance writes.

``validate_attendance`` is a pure decision over the same user's other records
on the same date; ``AttendanceRules`` fetches those siblings through the
repository and delegates. Rules are evaluated in a fixed order and the first
violation wins:

1. ``work`` needs both times.
2. ``work``/``halfDayOff`` cannot join an exclusive record.
3. ``dayOff``/``sickness``/``reserves`` cannot join any record.
4. A time range must be increasing and end by 23:59.
5. A time range must not overlap another timed record.
"""

from __future__ import annotations

from datetime import date, time
from typing import Iterable, Optional

from ..common.time_utils import duration_minutes, format_time, ranges_overlap
from ..core.constants import LATEST_END_OF_DAY, MAX_OVERNIGHT_SPAN_MIN, MINUTES_PER_DAY
from ..core.enums import AttendanceStatus, StatusKind, is_exclusive, status_kind
from ..core.results import RuleCode, RuleResult
from .model import AttendanceRecord
from .repository import AttendanceRepository


def check_time_range(start: time, end: time) -> RuleResult:
    """Range legality shared by attendance records and start/end time logs.

    Times are same-day wall clock values, so every valid time already ends by
    23:59. A reversed range is a midnight crossing when its overnight reading is
    a plausible shift (22:00-00:30); otherwise it is simply backwards (17:00-09:00).
    """
    duration = duration_minutes(start, end)
    if duration > 0:
        return RuleResult.ok()
    if duration == 0:
        return RuleResult.fail(RuleCode.INVALID_RANGE, "End time must be after start time")

    if duration + MINUTES_PER_DAY <= MAX_OVERNIGHT_SPAN_MIN:
        return RuleResult.fail(
            RuleCode.MIDNIGHT_CROSSING,
            f"Time range {format_time(start)}-{format_time(end)} crosses midnight "
            f"(end time cannot exceed {LATEST_END_OF_DAY})",
        )
    return RuleResult.fail(
        RuleCode.INVALID_RANGE,
        f"End time must be after start time ({format_time(start)}-{format_time(end)})",
    )


def validate_attendance(
    siblings: Iterable[AttendanceRecord],
    *,
    start: Optional[time],
    end: Optional[time],
    status: AttendanceStatus,
    exclude_id: Optional[int] = None,
) -> RuleResult:
    others = [r for r in siblings if exclude_id is None or r.attendance_id != exclude_id]
    kind = status_kind(status)
    has_times = start is not None and end is not None

    if kind is StatusKind.WORK and not has_times:
        return RuleResult.fail(RuleCode.MISSING_TIMES, "Start time and end time are required for work status")

    if kind in (StatusKind.WORK, StatusKind.PARTIAL):
        exclusive = next((r for r in others if is_exclusive(r.status)), None)
        if exclusive is not None:
            return RuleResult.fail(
                RuleCode.EXCLUSIVE_CONFLICT,
                f"Cannot add {status.value} attendance - exclusive status ({exclusive.status.value}) "
                "already exists on this date",
                conflicting_id=exclusive.attendance_id,
            )
    elif kind is StatusKind.EXCLUSIVE:
        if others:
            return RuleResult.fail(
                RuleCode.EXCLUSIVE_CONFLICT,
                f"Cannot add {status.value} - other attendance already exists on this date",
                conflicting_id=others[0].attendance_id,
            )
    else:
        raise ValueError(f"Unhandled status kind: {kind!r}")

    if not has_times:
        return RuleResult.ok()

    range_result = check_time_range(start, end)
    if not range_result.is_ok:
        return range_result

    for other in others:
        if not other.has_times:
            continue
        if ranges_overlap(start, end, other.start_time, other.end_time):
            return RuleResult.fail(
                RuleCode.OVERLAP_CONFLICT,
                f"Time range {format_time(start)}-{format_time(end)} overlaps with existing attendance "
                f"{format_time(other.start_time)}-{format_time(other.end_time)}",
                conflicting_id=other.attendance_id,
            )

    return RuleResult.ok()


class AttendanceRules:
    """Validator bound to the record-lookup collaborator."""

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def validate(
        self,
        *,
        user_id: int,
        work_date: date,
        start: Optional[time],
        end: Optional[time],
        status: AttendanceStatus,
        exclude_id: Optional[int] = None,
    ) -> RuleResult:
        siblings = self._attendance.list_for_user_and_date(user_id, work_date, exclude_id=exclude_id)
        return validate_attendance(siblings, start=start, end=end, status=status, exclude_id=exclude_id)
