from __future__ import annotations

from datetime import date, time

import pytest

from src.timesheet_system.timesheet_system.attendance.model import AttendanceRecord
from src.timesheet_system.timesheet_system.attendance.rules import check_time_range, validate_attendance
from src.timesheet_system.timesheet_system.core.enums import AttendanceStatus
from src.timesheet_system.timesheet_system.core.results import RuleCode

DAY = date(2025, 6, 1)


def _record(rid, status, start=None, end=None):
    return AttendanceRecord(attendance_id=rid, user_id=1, work_date=DAY, start_time=start, end_time=end, status=status)


def test_work_requires_both_times():
    result = validate_attendance([], start=time(9, 0), end=None, status=AttendanceStatus.WORK)
    assert result.code is RuleCode.MISSING_TIMES


def test_half_day_off_without_times_is_ok():
    assert validate_attendance([], start=None, end=None, status=AttendanceStatus.HALF_DAY_OFF).is_ok


@pytest.mark.parametrize("status", list(AttendanceStatus))
def test_any_status_conflicts_with_existing_day_off(status):
    siblings = [_record(1, AttendanceStatus.DAY_OFF)]
    start, end = (time(9, 0), time(12, 0)) if status is AttendanceStatus.WORK else (None, None)

    result = validate_attendance(siblings, start=start, end=end, status=status)

    assert result.code is RuleCode.EXCLUSIVE_CONFLICT
    assert result.details["conflicting_id"] == 1


@pytest.mark.parametrize("status", [AttendanceStatus.DAY_OFF, AttendanceStatus.SICKNESS, AttendanceStatus.RESERVES])
def test_exclusive_status_conflicts_with_any_record(status):
    siblings = [_record(7, AttendanceStatus.HALF_DAY_OFF)]
    assert validate_attendance(siblings, start=None, end=None, status=status).code is RuleCode.EXCLUSIVE_CONFLICT


def test_work_and_half_day_off_coexist():
    siblings = [_record(1, AttendanceStatus.WORK, time(9, 0), time(17, 0))]
    assert validate_attendance(siblings, start=None, end=None, status=AttendanceStatus.HALF_DAY_OFF).is_ok


def test_overlapping_work_is_rejected():
    siblings = [_record(1, AttendanceStatus.WORK, time(9, 0), time(17, 0))]
    result = validate_attendance(siblings, start=time(16, 0), end=time(18, 0), status=AttendanceStatus.WORK)
    assert result.code is RuleCode.OVERLAP_CONFLICT


def test_adjacent_work_is_allowed():
    siblings = [_record(1, AttendanceStatus.WORK, time(9, 0), time(12, 0))]
    assert validate_attendance(siblings, start=time(12, 0), end=time(15, 0), status=AttendanceStatus.WORK).is_ok


def test_excluded_record_does_not_conflict_with_itself():
    siblings = [_record(1, AttendanceStatus.WORK, time(9, 0), time(17, 0))]
    result = validate_attendance(
        siblings,
        start=time(10, 0),
        end=time(16, 0),
        status=AttendanceStatus.WORK,
        exclude_id=1,
    )
    assert result.is_ok


def test_late_evening_range_is_legal():
    assert check_time_range(time(22, 0), time(23, 59)).is_ok


def test_range_spanning_midnight_is_rejected():
    assert check_time_range(time(22, 0), time(0, 30)).code is RuleCode.MIDNIGHT_CROSSING


@pytest.mark.parametrize("start, end", [(time(17, 0), time(9, 0)), (time(12, 0), time(11, 59))])
def test_backwards_same_day_range_is_invalid(start, end):
    assert check_time_range(start, end).code is RuleCode.INVALID_RANGE


def test_short_overnight_reading_is_a_midnight_crossing():
    assert check_time_range(time(20, 0), time(8, 0)).code is RuleCode.MIDNIGHT_CROSSING
    assert check_time_range(time(20, 0), time(8, 1)).code is RuleCode.INVALID_RANGE


def test_empty_range_is_invalid():
    assert check_time_range(time(10, 0), time(10, 0)).code is RuleCode.INVALID_RANGE


def test_exclusivity_is_checked_before_range():
    siblings = [_record(1, AttendanceStatus.SICKNESS)]
    result = validate_attendance(siblings, start=time(10, 0), end=time(10, 0), status=AttendanceStatus.WORK)
    assert result.code is RuleCode.EXCLUSIVE_CONFLICT
