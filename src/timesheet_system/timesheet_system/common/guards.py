"""Bearer-token guards for API views.

The resolved user is stored on ``flask.g.current_user``.
"""

from __future__ import annotations

from functools import wraps

from flask import g, request

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError


class Guards:
    def __init__(self, auth_service):
        self._auth = auth_service

    def _authenticate(self) -> None:
        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise AuthenticationError("No token provided")
        g.current_user = self._auth.resolve_token(token.strip())

    def login_required(self, view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            self._authenticate()
            return view(*args, **kwargs)

        return wrapper

    def admin_required(self, view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            self._authenticate()
            if g.current_user.role != Role.ADMIN:
                raise AuthorizationError("Admin access required")
            return view(*args, **kwargs)

        return wrapper


def current_user_id() -> int:
    return int(g.current_user.user_id)


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
