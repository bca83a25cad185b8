from __future__ import annotations

from datetime import time, timedelta

import pytest

from src.timesheet_system.timesheet_system.common.time_utils import (
    InvalidTimeFormat,
    duration_minutes,
    format_time,
    parse_time,
    ranges_overlap,
    to_time_of_day,
)
from src.timesheet_system.timesheet_system.core.results import RuleCode


@pytest.mark.parametrize("text", ["00:00", "09:05", "12:30", "23:59"])
def test_format_parse_round_trip(text):
    assert format_time(parse_time(text)) == text


@pytest.mark.parametrize("text", ["24:00", "9:30", "12:60", "", "09:30:00", None])
def test_parse_rejects_malformed(text):
    with pytest.raises(InvalidTimeFormat) as exc:
        parse_time(text)
    assert exc.value.rule is RuleCode.INVALID_FORMAT
    assert exc.value.details["rule"] == "InvalidFormat"


def test_duration_can_be_zero_or_negative():
    assert duration_minutes("09:00", "17:00") == 480
    assert duration_minutes("09:00", "09:00") == 0
    assert duration_minutes("22:00", "00:30") == -1290


def test_touching_ranges_do_not_overlap():
    assert ranges_overlap("09:00", "10:00", "10:00", "11:00") is False
    assert ranges_overlap("10:00", "11:00", "09:00", "10:00") is False


def test_intersecting_ranges_overlap():
    assert ranges_overlap("09:00", "10:30", "10:00", "11:00") is True
    assert ranges_overlap("09:00", "17:00", "12:00", "13:00") is True


def test_to_time_of_day_accepts_driver_values():
    assert to_time_of_day(None) is None
    assert to_time_of_day(timedelta(hours=8, minutes=30)) == time(8, 30)
    assert to_time_of_day("08:30:00") == time(8, 30)
    assert to_time_of_day(time(8, 30, 15)) == time(8, 30)
