from __future__ import annotations

from datetime import date, time

import pytest

from src.timesheet_system.timesheet_system.core.enums import AttendanceStatus
from src.timesheet_system.timesheet_system.core.exceptions import NotFoundError
from src.timesheet_system.timesheet_system.core.results import RuleCode
from src.timesheet_system.timesheet_system.timelogs.coverage import (
    CoverageCheck,
    check_logs_before_status_change,
)

DAY = date(2025, 6, 1)


def test_coverage_accumulates_towards_required(attendance_repo, time_logs_repo):
    rid = attendance_repo.add(user_id=1, work_date=DAY, start=time(9, 0), end=time(17, 0))
    check = CoverageCheck(attendance_repo, time_logs_repo)

    result = check.check(rid, 200)
    assert result.code is RuleCode.INSUFFICIENT_COVERAGE
    assert result.details == {"have": 200, "need": 480}

    assert check.check(rid, 500).is_ok
    assert check.check(rid, 480).is_ok


def test_untimed_record_has_no_coverage_constraint(attendance_repo, time_logs_repo):
    rid = attendance_repo.add(user_id=1, work_date=DAY, status=AttendanceStatus.HALF_DAY_OFF)
    assert CoverageCheck(attendance_repo, time_logs_repo).check(rid, 0).is_ok


def test_missing_record(attendance_repo, time_logs_repo):
    with pytest.raises(NotFoundError):
        CoverageCheck(attendance_repo, time_logs_repo).check(5, 0)


def test_pending_total_adds_to_persisted_logs(attendance_repo, time_logs_repo):
    rid = attendance_repo.add(user_id=1, work_date=DAY, start=time(9, 0), end=time(17, 0))
    keep = time_logs_repo.add(rid, 300)
    other = time_logs_repo.add(rid, 180)
    check = CoverageCheck(attendance_repo, time_logs_repo)

    assert check.check_pending(rid).is_ok
    assert check.check_pending(rid, exclude_log_id=other, pending_minutes=180).is_ok
    result = check.check_pending(rid, exclude_log_id=keep)
    assert result.details == {"have": 180, "need": 480}


def test_parent_record_is_read_before_logs_are_summed(attendance_repo, time_logs_repo, monkeypatch):
    rid = attendance_repo.add(user_id=1, work_date=DAY, start=time(9, 0), end=time(17, 0))
    time_logs_repo.add(rid, 480)
    calls = []

    get_record = attendance_repo.get_by_id
    total = time_logs_repo.total_minutes
    monkeypatch.setattr(attendance_repo, "get_by_id", lambda aid: calls.append("record") or get_record(aid))
    monkeypatch.setattr(time_logs_repo, "total_minutes", lambda aid, **kw: calls.append("sum") or total(aid, **kw))

    CoverageCheck(attendance_repo, time_logs_repo).check_pending(rid)

    assert calls == ["record", "sum"]


@pytest.mark.parametrize("new_status", [AttendanceStatus.DAY_OFF, AttendanceStatus.SICKNESS, AttendanceStatus.RESERVES])
def test_work_to_exclusive_needs_empty_logs(new_status):
    assert check_logs_before_status_change(AttendanceStatus.WORK, new_status, 2).code is RuleCode.LOGS_EXIST_CONFLICT
    assert check_logs_before_status_change(AttendanceStatus.WORK, new_status, 0).is_ok


def test_other_transitions_ignore_logs():
    assert check_logs_before_status_change(AttendanceStatus.WORK, AttendanceStatus.HALF_DAY_OFF, 3).is_ok
    assert check_logs_before_status_change(AttendanceStatus.HALF_DAY_OFF, AttendanceStatus.DAY_OFF, 3).is_ok
    assert check_logs_before_status_change(AttendanceStatus.WORK, AttendanceStatus.WORK, 3).is_ok
