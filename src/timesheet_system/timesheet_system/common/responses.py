"""JSON envelope shared by every API controller.

Success: ``{"success": true, "data": ...}``
Error:   ``{"success": false, "error": {"code", "message", "details"?}}``
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError

logger = logging.getLogger(__name__)


def success(data: Any, status_code: int = 200):
    return jsonify({"success": True, "data": data}), status_code


def error(code: str, message: str, status_code: int = 400, details: Optional[Any] = None):
    body: dict[str, Any] = {"code": code, "message": message}
    if details:
        body["details"] = details
    return jsonify({"success": False, "error": body}), status_code


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        logger.info("%s %s: %s", e.status_code, e.code, e.message)
        return error(e.code, e.message, e.status_code, e.details)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        code = (e.name or "HTTP_ERROR").upper().replace(" ", "_")
        return error(code, e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error")
        if app.config.get("DEBUG"):
            return error("INTERNAL_ERROR", f"An unexpected error occurred: {e}", 500)
        return error("INTERNAL_ERROR", "An unexpected error occurred", 500)
