from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Record-lookup and persistence collaborator for attendance rows."""

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_user_and_date(
        self,
        user_id: int,
        work_date: date,
        *,
        exclude_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_user_between(self, user_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        """Newest first."""

        raise NotImplementedError

    def create(
        self,
        *,
        user_id: int,
        work_date: date,
        start_time: Optional[time],
        end_time: Optional[time],
        status: AttendanceStatus,
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        *,
        attendance_id: int,
        start_time: Optional[time],
        end_time: Optional[time],
        status: AttendanceStatus,
    ) -> bool:
        raise NotImplementedError
