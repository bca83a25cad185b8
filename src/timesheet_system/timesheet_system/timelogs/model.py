from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional

from ..core.enums import LocationStatus


@dataclass(frozen=True)
class TimeLog:
    """Domain entity: reported time against a task, child of an attendance record."""

    log_id: int
    attendance_id: int
    task_id: int
    duration_min: int
    start_time: Optional[time]
    end_time: Optional[time]
    location: LocationStatus
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class TimeLogDetail:
    """Time log joined with its task -> project -> client names."""

    log: TimeLog
    task_name: str
    project_id: int
    project_name: str
    client_id: int
    client_name: str
