from __future__ import annotations

from datetime import time
from typing import Optional, Protocol, Sequence

from ..core.enums import LocationStatus
from .model import TimeLog, TimeLogDetail


class TimeLogRepository(Protocol):
    def get_by_id(self, log_id: int) -> Optional[TimeLog]:
        raise NotImplementedError

    def list_for_attendance(self, attendance_id: int) -> Sequence[TimeLog]:
        """Oldest first."""

        raise NotImplementedError

    def count_for_attendance(self, attendance_id: int) -> int:
        raise NotImplementedError

    def total_minutes(self, attendance_id: int, *, exclude_log_id: Optional[int] = None) -> int:
        """Sum of ``duration_min`` for the attendance, optionally leaving one log out."""

        raise NotImplementedError

    def list_details_for_attendances(self, attendance_ids: Sequence[int]) -> Sequence[TimeLogDetail]:
        raise NotImplementedError

    def usage_counts_for_user(self, user_id: int) -> dict[int, int]:
        """Number of the user's logs per task id."""

        raise NotImplementedError

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
        raise NotImplementedError

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
        raise NotImplementedError

    def delete(self, log_id: int) -> bool:
        raise NotImplementedError
