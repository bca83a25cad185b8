from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional

from ..attendance.rules import check_time_range
from ..common.time_utils import duration_minutes, parse_time
from ..core.enums import LocationStatus, ReportingType
from ..core.exceptions import NotFoundError, RuleViolationError, ValidationError
from ..projects.model import TaskContext
from ..projects.repository import ProjectRepository


@dataclass(frozen=True)
class LogInput:
    """Raw time log fields as submitted; which ones count depends on the project."""

    task_id: int
    location: LocationStatus
    duration: Optional[int] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class ResolvedLog:
    task_id: int
    duration_min: int
    start_time: Optional[time]
    end_time: Optional[time]
    location: LocationStatus
    description: Optional[str]


def resolve_fields(
    task: TaskContext,
    *,
    duration: Optional[int],
    start_time: Optional[str],
    end_time: Optional[str],
    prefix: str = "",
) -> tuple[int, Optional[time], Optional[time]]:
    """Pick the representation the task's project asks for.

    ``startEnd`` derives the duration from the range; ``duration`` takes the
    minutes as given. Fields of the other representation are ignored.
    """

    if task.reporting_type is ReportingType.START_END:
        if not start_time or not end_time:
            raise ValidationError(f"{prefix}Project requires startTime and endTime (reportingType=startEnd)")
        start, end = parse_time(start_time), parse_time(end_time)
        range_result = check_time_range(start, end)
        if not range_result.is_ok:
            raise RuleViolationError(
                range_result.code,
                f"{prefix}{range_result.message}",
                details={"rule": range_result.code.value, **range_result.details},
            )
        return duration_minutes(start, end), start, end

    if task.reporting_type is ReportingType.DURATION:
        if duration is None:
            raise ValidationError(f"{prefix}Project requires duration in minutes (reportingType=duration)")
        if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
            raise ValidationError(f"{prefix}Duration must be a positive integer (minutes)")
        return duration, None, None

    raise ValueError(f"Unhandled reporting type: {task.reporting_type!r}")


def resolve_log(projects: ProjectRepository, entry: LogInput, *, prefix: str = "") -> ResolvedLog:
    task = projects.get_task_context(entry.task_id)
    if not task:
        raise NotFoundError(f"{prefix}Task not found")

    duration_min, start, end = resolve_fields(
        task,
        duration=entry.duration,
        start_time=entry.start_time,
        end_time=entry.end_time,
        prefix=prefix,
    )
    return ResolvedLog(
        task_id=task.task_id,
        duration_min=duration_min,
        start_time=start,
        end_time=end,
        location=entry.location,
        description=entry.description or None,
    )
