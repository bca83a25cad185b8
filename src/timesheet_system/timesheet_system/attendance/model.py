from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import AttendanceStatus
from ..timelogs.model import TimeLogDetail


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one worker's daily status/time submission."""

    attendance_id: int
    user_id: int
    work_date: date
    start_time: Optional[time]
    end_time: Optional[time]
    status: AttendanceStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def has_times(self) -> bool:
        return self.start_time is not None and self.end_time is not None


@dataclass(frozen=True)
class AttendanceHistoryEntry:
    """Read-model for the month history screen."""

    record: AttendanceRecord
    time_logs: list[TimeLogDetail] = field(default_factory=list)
