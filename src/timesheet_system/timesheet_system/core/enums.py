from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    ADMIN = "admin"
    WORKER = "worker"


class AttendanceStatus(str, Enum):
    """Daily attendance status as stored in the database."""

    WORK = "work"
    HALF_DAY_OFF = "halfDayOff"
    DAY_OFF = "dayOff"
    SICKNESS = "sickness"
    RESERVES = "reserves"


class StatusKind(str, Enum):
    """How a status takes part in the same-day coexistence rules."""

    WORK = "work"
    PARTIAL = "partial"
    EXCLUSIVE = "exclusive"


class ReportingType(str, Enum):
    """Per-project policy deciding which fields a time log carries."""

    DURATION = "duration"
    START_END = "startEnd"


class LocationStatus(str, Enum):
    OFFICE = "office"
    CLIENT = "client"
    HOME = "home"


class TaskStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


_STATUS_KINDS = {
    AttendanceStatus.WORK: StatusKind.WORK,
    AttendanceStatus.HALF_DAY_OFF: StatusKind.PARTIAL,
    AttendanceStatus.DAY_OFF: StatusKind.EXCLUSIVE,
    AttendanceStatus.SICKNESS: StatusKind.EXCLUSIVE,
    AttendanceStatus.RESERVES: StatusKind.EXCLUSIVE,
}


def status_kind(status: AttendanceStatus) -> StatusKind:
    """Classify a status; every member must be mapped explicitly."""
    try:
        return _STATUS_KINDS[AttendanceStatus(status)]
    except KeyError:
        raise ValueError(f"Unclassified attendance status: {status!r}") from None


def is_exclusive(status: AttendanceStatus) -> bool:
    return status_kind(status) is StatusKind.EXCLUSIVE


def is_non_work(status: AttendanceStatus) -> bool:
    """Statuses that never carry a time range on update."""
    return status_kind(status) is not StatusKind.WORK
