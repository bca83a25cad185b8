from __future__ import annotations

from typing import Any

from flask import Flask, g, request

from ..common.audit import log_audit
from ..common.guards import Guards, current_user_id, json_body
from ..common.responses import success
from ..common.validators import optional_bool, optional_enum, query_flag, require_enum, require_non_empty
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.auth_service)
    users = container.user_service

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        body = json_body()
        result = container.auth_service.login(
            require_non_empty(body.get("mail"), "mail").lower(),
            require_non_empty(body.get("password"), "password"),
        )
        return success(result)

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @guards.login_required
    def auth_me():
        return success(g.current_user.public_view())

    @app.route("/api/admin/users", methods=["GET"], endpoint="admin_users_list")
    @guards.admin_required
    def admin_users_list():
        active = query_flag(request.args.get("active"))
        role = optional_enum(request.args.get("userType") or None, Role, "userType")
        found = users.list_users(active=True if active is None else active, role=role)
        return success([u.public_view() for u in found])

    @app.route("/api/admin/users/<int:user_id>", methods=["GET"], endpoint="admin_users_get")
    @guards.admin_required
    def admin_users_get(user_id: int):
        return success(users.get(user_id).public_view())

    @app.route("/api/admin/users", methods=["POST"], endpoint="admin_users_create")
    @guards.admin_required
    def admin_users_create():
        body = json_body()
        user_id = users.create_user(
            name=body.get("name"),
            mail=body.get("mail"),
            password=body.get("password"),
            role=require_enum(body.get("userType", Role.WORKER.value), Role, "userType"),
        )
        log_audit("CREATE_USER", user_id=current_user_id(), entity="User", entity_id=user_id)
        return success({"id": user_id}, 201)

    @app.route("/api/admin/users/<int:user_id>", methods=["PUT"], endpoint="admin_users_update")
    @guards.admin_required
    def admin_users_update(user_id: int):
        body = json_body()
        changes: dict[str, Any] = {
            "name": body.get("name"),
            "mail": body.get("mail"),
            "role": optional_enum(body.get("userType"), Role, "userType"),
            "active": optional_bool(body.get("active"), "active"),
        }
        user = users.update_user(user_id, **changes)
        log_audit("UPDATE_USER", user_id=current_user_id(), entity="User", entity_id=user_id)
        return success(user.public_view())

    @app.route("/api/admin/users/<int:user_id>", methods=["DELETE"], endpoint="admin_users_delete")
    @guards.admin_required
    def admin_users_delete(user_id: int):
        users.deactivate(user_id)
        log_audit("DELETE_USER", user_id=current_user_id(), entity="User", entity_id=user_id)
        return success({"deleted": True})

    @app.route("/api/admin/users/<int:user_id>/reset-password", methods=["POST"], endpoint="admin_users_reset_password")
    @guards.admin_required
    def admin_users_reset_password(user_id: int):
        users.reset_password(user_id, json_body().get("newPassword"))
        log_audit("RESET_PASSWORD", user_id=current_user_id(), entity="User", entity_id=user_id)
        return success({"updated": True})
