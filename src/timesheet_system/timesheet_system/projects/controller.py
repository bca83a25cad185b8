from __future__ import annotations

from typing import Any

from flask import Flask, request

from ..common.audit import log_audit
from ..common.guards import Guards, current_user_id, json_body
from ..common.responses import success
from ..common.validators import (
    optional_bool,
    optional_date,
    optional_enum,
    optional_id,
    optional_text,
    query_flag,
    require_date,
    require_id,
    require_non_empty,
)
from ..container import Container
from ..core.enums import ReportingType, TaskStatus
from ..core.exceptions import ValidationError
from .model import Client, Project, Task


def _iso(value) -> Any:
    return value.isoformat() if value else None


def serialize_client(c: Client) -> dict[str, Any]:
    return {"id": c.client_id, "name": c.name, "description": c.description, "active": c.active, "createdAt": _iso(c.created_at)}


def serialize_project(p: Project) -> dict[str, Any]:
    return {
        "id": p.project_id,
        "name": p.name,
        "clientId": p.client_id,
        "projectManagerId": p.project_manager_id,
        "startDate": _iso(p.start_date),
        "endDate": _iso(p.end_date),
        "description": p.description,
        "reportingType": p.reporting_type.value,
        "active": p.active,
        "createdAt": _iso(p.created_at),
    }


def serialize_task(t: Task) -> dict[str, Any]:
    return {
        "id": t.task_id,
        "name": t.name,
        "projectId": t.project_id,
        "startDate": _iso(t.start_date),
        "endDate": _iso(t.end_date),
        "description": t.description,
        "status": t.status.value,
        "createdAt": _iso(t.created_at),
    }


_PROJECT_FIELDS = {
    "name": ("name", lambda v: require_non_empty(v, "name")),
    "clientId": ("client_id", lambda v: require_id(v, "clientId")),
    "projectManagerId": ("project_manager_id", lambda v: require_id(v, "projectManagerId")),
    "startDate": ("start_date", lambda v: optional_date(v, "startDate")),
    "endDate": ("end_date", lambda v: optional_date(v, "endDate")),
    "description": ("description", lambda v: optional_text(v, "description")),
    "reportingType": ("reporting_type", lambda v: optional_enum(v, ReportingType, "reportingType")),
    "active": ("active", lambda v: optional_bool(v, "active")),
}

_TASK_FIELDS = {
    "name": ("name", lambda v: require_non_empty(v, "name")),
    "projectId": ("project_id", lambda v: require_id(v, "projectId")),
    "startDate": ("start_date", lambda v: optional_date(v, "startDate")),
    "endDate": ("end_date", lambda v: optional_date(v, "endDate")),
    "description": ("description", lambda v: optional_text(v, "description")),
    "status": ("status", lambda v: optional_enum(v, TaskStatus, "status")),
}


def _collect(body: dict, fields: dict) -> dict[str, Any]:
    changes: dict[str, Any] = {}
    for key, (attr, parse) in fields.items():
        if key in body:
            value = parse(body[key])
            if value is None and attr in {"reporting_type", "active", "status"}:
                continue
            changes[attr] = value
    return changes


def _task_status_filter(raw: Any):
    if raw in (None, "", "open"):
        return TaskStatus.OPEN
    if raw == "closed":
        return TaskStatus.CLOSED
    if raw == "all":
        return None
    raise ValidationError("status must be one of: open, closed, all")


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.auth_service)
    catalog = container.project_catalog_service

    @app.route("/api/projects/selector", methods=["GET"], endpoint="project_selector")
    @guards.login_required
    def project_selector():
        return success(container.project_selector_service.for_user(current_user_id()))

    # Clients
    @app.route("/api/admin/clients", methods=["GET"], endpoint="admin_clients_list")
    @guards.admin_required
    def admin_clients_list():
        clients = catalog.list_clients(active=query_flag(request.args.get("active")))
        return success([serialize_client(c) for c in clients])

    @app.route("/api/admin/clients", methods=["POST"], endpoint="admin_clients_create")
    @guards.admin_required
    def admin_clients_create():
        body = json_body()
        client_id = catalog.create_client(
            name=require_non_empty(body.get("name"), "name"),
            description=optional_text(body.get("description"), "description"),
        )
        log_audit("CREATE_CLIENT", user_id=current_user_id(), entity="Client", entity_id=client_id)
        return success({"id": client_id}, 201)

    @app.route("/api/admin/clients/<int:client_id>", methods=["PUT"], endpoint="admin_clients_update")
    @guards.admin_required
    def admin_clients_update(client_id: int):
        body = json_body()
        changes: dict[str, Any] = {}
        if "name" in body:
            changes["name"] = require_non_empty(body["name"], "name")
        if "description" in body:
            changes["description"] = optional_text(body["description"], "description")
        if body.get("active") is not None:
            changes["active"] = optional_bool(body["active"], "active")

        client = catalog.update_client(client_id, **changes)
        log_audit("UPDATE_CLIENT", user_id=current_user_id(), entity="Client", entity_id=client_id)
        return success(serialize_client(client))

    @app.route("/api/admin/clients/<int:client_id>", methods=["DELETE"], endpoint="admin_clients_delete")
    @guards.admin_required
    def admin_clients_delete(client_id: int):
        catalog.delete_client(client_id)
        log_audit("DELETE_CLIENT", user_id=current_user_id(), entity="Client", entity_id=client_id)
        return success({"deleted": True})

    # Projects
    @app.route("/api/admin/projects", methods=["GET"], endpoint="admin_projects_list")
    @guards.admin_required
    def admin_projects_list():
        projects = catalog.list_projects(
            client_id=optional_id(request.args.get("clientId") or None, "clientId"),
            active=query_flag(request.args.get("active")),
        )
        return success([serialize_project(p) for p in projects])

    @app.route("/api/admin/projects", methods=["POST"], endpoint="admin_projects_create")
    @guards.admin_required
    def admin_projects_create():
        body = json_body()
        project_id = catalog.create_project(
            name=require_non_empty(body.get("name"), "name"),
            client_id=require_id(body.get("clientId"), "clientId"),
            project_manager_id=require_id(body.get("projectManagerId"), "projectManagerId"),
            start_date=require_date(body.get("startDate"), "startDate"),
            end_date=optional_date(body.get("endDate"), "endDate"),
            description=optional_text(body.get("description"), "description"),
            reporting_type=optional_enum(body.get("reportingType"), ReportingType, "reportingType")
            or ReportingType.START_END,
        )
        log_audit("CREATE_PROJECT", user_id=current_user_id(), entity="Project", entity_id=project_id)
        return success({"id": project_id}, 201)

    @app.route("/api/admin/projects/<int:project_id>", methods=["PUT"], endpoint="admin_projects_update")
    @guards.admin_required
    def admin_projects_update(project_id: int):
        project = catalog.update_project(project_id, **_collect(json_body(), _PROJECT_FIELDS))
        log_audit("UPDATE_PROJECT", user_id=current_user_id(), entity="Project", entity_id=project_id)
        return success(serialize_project(project))

    @app.route(
        "/api/admin/projects/<int:project_id>/toggle-reporting-type",
        methods=["PATCH", "POST"],
        endpoint="admin_projects_toggle_reporting_type",
    )
    @guards.admin_required
    def admin_projects_toggle_reporting_type(project_id: int):
        new_type = catalog.toggle_reporting_type(project_id)
        log_audit(
            "TOGGLE_REPORTING_TYPE",
            user_id=current_user_id(),
            entity="Project",
            entity_id=project_id,
            reporting_type=new_type.value,
        )
        return success({"updated": True, "reportingType": new_type.value})

    @app.route("/api/admin/projects/<int:project_id>", methods=["DELETE"], endpoint="admin_projects_delete")
    @guards.admin_required
    def admin_projects_delete(project_id: int):
        catalog.delete_project(project_id)
        log_audit("DELETE_PROJECT", user_id=current_user_id(), entity="Project", entity_id=project_id)
        return success({"deleted": True})

    # Tasks
    @app.route("/api/admin/tasks", methods=["GET"], endpoint="admin_tasks_list")
    @guards.admin_required
    def admin_tasks_list():
        tasks = catalog.list_tasks(
            project_id=optional_id(request.args.get("projectId") or None, "projectId"),
            status=_task_status_filter(request.args.get("status")),
        )
        return success([serialize_task(t) for t in tasks])

    @app.route("/api/admin/tasks", methods=["POST"], endpoint="admin_tasks_create")
    @guards.admin_required
    def admin_tasks_create():
        body = json_body()
        task_id = catalog.create_task(
            name=require_non_empty(body.get("name"), "name"),
            project_id=require_id(body.get("projectId"), "projectId"),
            start_date=optional_date(body.get("startDate"), "startDate"),
            end_date=optional_date(body.get("endDate"), "endDate"),
            description=optional_text(body.get("description"), "description"),
            status=optional_enum(body.get("status"), TaskStatus, "status") or TaskStatus.OPEN,
        )
        log_audit("CREATE_TASK", user_id=current_user_id(), entity="Task", entity_id=task_id)
        return success({"id": task_id}, 201)

    @app.route("/api/admin/tasks/<int:task_id>", methods=["PUT"], endpoint="admin_tasks_update")
    @guards.admin_required
    def admin_tasks_update(task_id: int):
        task = catalog.update_task(task_id, **_collect(json_body(), _TASK_FIELDS))
        log_audit("UPDATE_TASK", user_id=current_user_id(), entity="Task", entity_id=task_id)
        return success(serialize_task(task))

    @app.route("/api/admin/tasks/<int:task_id>", methods=["DELETE"], endpoint="admin_tasks_delete")
    @guards.admin_required
    def admin_tasks_delete(task_id: int):
        catalog.delete_task(task_id)
        log_audit("DELETE_TASK", user_id=current_user_id(), entity="Task", entity_id=task_id)
        return success({"deleted": True})

    # Assignments
    @app.route("/api/admin/tasks/<int:task_id>/workers", methods=["GET"], endpoint="admin_task_workers")
    @guards.admin_required
    def admin_task_workers(task_id: int):
        return success(list(catalog.task_workers(task_id)))

    @app.route("/api/admin/tasks/<int:task_id>/workers", methods=["POST"], endpoint="admin_task_assign")
    @guards.admin_required
    def admin_task_assign(task_id: int):
        user_id = require_id(json_body().get("userId"), "userId")
        created = catalog.assign(task_id=task_id, user_id=user_id)
        log_audit("ASSIGN_WORKER", user_id=current_user_id(), entity="Task", entity_id=task_id, worker_id=user_id)
        return success({"assigned": True, "created": created}, 201 if created else 200)

    @app.route(
        "/api/admin/tasks/<int:task_id>/workers/<int:user_id>",
        methods=["DELETE"],
        endpoint="admin_task_unassign",
    )
    @guards.admin_required
    def admin_task_unassign(task_id: int, user_id: int):
        catalog.unassign(task_id=task_id, user_id=user_id)
        log_audit("UNASSIGN_WORKER", user_id=current_user_id(), entity="Task", entity_id=task_id, worker_id=user_id)
        return success({"deleted": True})
