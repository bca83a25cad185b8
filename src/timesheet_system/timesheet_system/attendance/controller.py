from __future__ import annotations

from typing import Any

from flask import Flask, request

from ..common.audit import log_audit
from ..common.guards import Guards, current_user_id, json_body
from ..common.responses import success
from ..common.time_utils import format_time
from ..common.validators import (
    optional_enum,
    optional_id,
    optional_text,
    optional_time_text,
    require_date,
    require_enum,
    require_id,
    require_time_text,
)
from ..container import Container
from ..core.enums import AttendanceStatus, LocationStatus
from ..core.exceptions import ValidationError
from ..timelogs.controller import serialize_time_log
from ..timelogs.entries import LogInput
from .model import AttendanceHistoryEntry, AttendanceRecord
from .service import UNSET


def serialize_attendance(record: AttendanceRecord) -> dict[str, Any]:
    return {
        "id": record.attendance_id,
        "userId": record.user_id,
        "date": record.work_date.isoformat(),
        "startTime": format_time(record.start_time) if record.start_time else None,
        "endTime": format_time(record.end_time) if record.end_time else None,
        "status": record.status.value,
        "createdAt": record.created_at.isoformat() if record.created_at else None,
        "updatedAt": record.updated_at.isoformat() if record.updated_at else None,
    }


def _serialize_history(entry: AttendanceHistoryEntry) -> dict[str, Any]:
    out = serialize_attendance(entry.record)
    out["timeLogs"] = [
        {
            **serialize_time_log(d.log),
            "task": {"id": d.log.task_id, "name": d.task_name},
            "project": {"id": d.project_id, "name": d.project_name},
            "client": {"id": d.client_id, "name": d.client_name},
        }
        for d in entry.time_logs
    ]
    return out


def _parse_log(raw: Any, index: int) -> LogInput:
    prefix = f"Time log #{index}: "
    if not isinstance(raw, dict):
        raise ValidationError(f"{prefix}must be an object")
    try:
        duration = raw.get("duration")
        if duration is not None and (isinstance(duration, bool) or not isinstance(duration, int)):
            raise ValidationError("duration must be an integer (minutes)")
        return LogInput(
            task_id=require_id(raw.get("taskId"), "taskId"),
            location=require_enum(raw.get("location"), LocationStatus, "location"),
            duration=duration,
            start_time=optional_time_text(raw.get("startTime"), "startTime"),
            end_time=optional_time_text(raw.get("endTime"), "endTime"),
            description=optional_text(raw.get("description"), "description"),
        )
    except ValidationError as e:
        raise ValidationError(f"{prefix}{e.message}", details=e.details)


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.auth_service)
    service = container.attendance_service

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_create")
    @guards.login_required
    def attendance_create():
        body = json_body()
        status = require_enum(body.get("status"), AttendanceStatus, "status")
        if status is AttendanceStatus.WORK:
            raise ValidationError("Work attendance must be submitted via /api/attendance/combined")

        user_id = current_user_id()
        work_date = require_date(body.get("date"), "date")
        start_time = optional_time_text(body.get("startTime"), "startTime")
        end_time = optional_time_text(body.get("endTime"), "endTime")

        attendance_id = service.create(
            user_id=user_id,
            work_date=work_date,
            start_time=start_time,
            end_time=end_time,
            status=status,
        )
        log_audit(
            "CREATE_ATTENDANCE",
            user_id=user_id,
            entity="DailyAttendance",
            entity_id=attendance_id,
            date=work_date.isoformat(),
            status=status.value,
        )
        return success({"id": attendance_id}, 201)

    @app.route("/api/attendance/combined", methods=["POST"], endpoint="attendance_create_combined")
    @guards.login_required
    def attendance_create_combined():
        body = json_body()
        raw_logs = body.get("timeLogs")
        if not isinstance(raw_logs, list) or not raw_logs:
            raise ValidationError("At least one time log is required")

        user_id = current_user_id()
        work_date = require_date(body.get("date"), "date")
        result = service.create_combined(
            user_id=user_id,
            work_date=work_date,
            start_time=require_time_text(body.get("startTime"), "startTime"),
            end_time=require_time_text(body.get("endTime"), "endTime"),
            time_logs=[_parse_log(raw, i) for i, raw in enumerate(raw_logs, start=1)],
        )
        log_audit(
            "CREATE_COMBINED_ATTENDANCE",
            user_id=user_id,
            entity="DailyAttendance",
            entity_id=result["attendanceId"],
            date=work_date.isoformat(),
            time_logs=len(result["timeLogIds"]),
        )
        return success(result, 201)

    @app.route("/api/attendance/month-history", methods=["GET"], endpoint="attendance_month_history")
    @guards.login_required
    def attendance_month_history():
        month = optional_id(request.args.get("month"), "month")
        if month is None:
            raise ValidationError("month is required")
        year = optional_id(request.args.get("year"), "year")

        entries = service.month_history(current_user_id(), month, year=year)
        return success([_serialize_history(e) for e in entries])

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_update")
    @guards.login_required
    def attendance_update(attendance_id: int):
        body = json_body()
        if "date" in body:
            raise ValidationError("Date cannot be changed on an existing attendance record")

        user_id = current_user_id()
        service.ensure_owner(attendance_id, user_id)

        changes: dict[str, Any] = {}
        if "startTime" in body:
            changes["start_time"] = optional_time_text(body["startTime"], "startTime")
        if "endTime" in body:
            changes["end_time"] = optional_time_text(body["endTime"], "endTime")
        if "status" in body:
            changes["status"] = optional_enum(body["status"], AttendanceStatus, "status") or UNSET

        record = service.update(attendance_id, **changes)
        log_audit(
            "UPDATE_ATTENDANCE",
            user_id=user_id,
            entity="DailyAttendance",
            entity_id=attendance_id,
            status=record.status.value,
        )
        return success(serialize_attendance(record))
