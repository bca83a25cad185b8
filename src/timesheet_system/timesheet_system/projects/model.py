from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ReportingType, TaskStatus


@dataclass(frozen=True)
class Client:
    client_id: int
    name: str
    description: Optional[str] = None
    active: bool = True
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Project:
    project_id: int
    name: str
    client_id: int
    project_manager_id: int
    start_date: date
    end_date: Optional[date] = None
    description: Optional[str] = None
    reporting_type: ReportingType = ReportingType.START_END
    active: bool = True
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Task:
    task_id: int
    name: str
    project_id: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.OPEN
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class TaskContext:
    """A task with the project/client facts time logging depends on."""

    task_id: int
    task_name: str
    task_status: TaskStatus
    project_id: int
    project_name: str
    reporting_type: ReportingType
    project_active: bool
    client_id: int
    client_name: str
    client_active: bool
