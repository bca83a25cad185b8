from __future__ import annotations

from typing import Any

from flask import Flask, request

from ..common.audit import log_audit
from ..common.guards import Guards, current_user_id, json_body
from ..common.responses import success
from ..common.time_utils import format_time
from ..common.validators import optional_text, optional_time_text, require_enum, require_id
from ..container import Container
from ..core.enums import LocationStatus
from ..core.exceptions import ValidationError
from .entries import LogInput
from .model import TimeLog


def serialize_time_log(log: TimeLog) -> dict[str, Any]:
    return {
        "id": log.log_id,
        "dailyAttendanceId": log.attendance_id,
        "taskId": log.task_id,
        "duration": log.duration_min,
        "startTime": format_time(log.start_time) if log.start_time else None,
        "endTime": format_time(log.end_time) if log.end_time else None,
        "location": log.location.value,
        "description": log.description,
        "createdAt": log.created_at.isoformat() if log.created_at else None,
        "updatedAt": log.updated_at.isoformat() if log.updated_at else None,
    }


def _duration_field(value: Any) -> Any:
    if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
        raise ValidationError("duration must be an integer (minutes)")
    return value


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.auth_service)
    service = container.time_log_service
    attendance = container.attendance_service

    def _own_log(log_id: int) -> TimeLog:
        log = service.get(log_id)
        attendance.ensure_owner(log.attendance_id, current_user_id())
        return log

    @app.route("/api/time-logs", methods=["POST"], endpoint="time_log_create")
    @guards.login_required
    def time_log_create():
        body = json_body()
        attendance_id = require_id(body.get("dailyAttendanceId"), "dailyAttendanceId")
        attendance.ensure_owner(attendance_id, current_user_id())

        entry = LogInput(
            task_id=require_id(body.get("taskId"), "taskId"),
            location=require_enum(body.get("location"), LocationStatus, "location"),
            duration=_duration_field(body.get("duration")),
            start_time=optional_time_text(body.get("startTime"), "startTime"),
            end_time=optional_time_text(body.get("endTime"), "endTime"),
            description=optional_text(body.get("description"), "description"),
        )
        result = service.create(attendance_id, entry)
        log_audit(
            "CREATE_TIME_LOG",
            user_id=current_user_id(),
            entity="ProjectTimeLog",
            entity_id=result["id"],
            attendance_id=attendance_id,
            task_id=entry.task_id,
        )
        return success(result, 201)

    @app.route("/api/time-logs", methods=["GET"], endpoint="time_log_list")
    @guards.login_required
    def time_log_list():
        attendance_id = require_id(request.args.get("dailyAttendanceId"), "dailyAttendanceId")
        attendance.ensure_owner(attendance_id, current_user_id())
        return success([serialize_time_log(log) for log in service.list_for_attendance(attendance_id)])

    @app.route("/api/time-logs/<int:log_id>", methods=["PUT"], endpoint="time_log_update")
    @guards.login_required
    def time_log_update(log_id: int):
        body = json_body()
        _own_log(log_id)

        changes: dict[str, Any] = {}
        if "taskId" in body:
            changes["task_id"] = require_id(body["taskId"], "taskId")
        if "duration" in body:
            changes["duration"] = _duration_field(body["duration"])
        if "startTime" in body:
            changes["start_time"] = optional_time_text(body["startTime"], "startTime")
        if "endTime" in body:
            changes["end_time"] = optional_time_text(body["endTime"], "endTime")
        if "location" in body:
            changes["location"] = require_enum(body["location"], LocationStatus, "location")
        if "description" in body:
            changes["description"] = optional_text(body["description"], "description")

        updated = service.update(log_id, **changes)
        log_audit("UPDATE_TIME_LOG", user_id=current_user_id(), entity="ProjectTimeLog", entity_id=log_id)
        return success(serialize_time_log(updated))

    @app.route("/api/time-logs/<int:log_id>", methods=["DELETE"], endpoint="time_log_delete")
    @guards.login_required
    def time_log_delete(log_id: int):
        _own_log(log_id)
        service.delete(log_id)
        log_audit("DELETE_TIME_LOG", user_id=current_user_id(), entity="ProjectTimeLog", entity_id=log_id)
        return success({"deleted": True})
