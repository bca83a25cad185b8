from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "DOMAIN_ERROR"
    status_code = 400

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"


class RuleViolationError(ValidationError):
    """A consistency rule rejected the write; carries the rule code."""

    def __init__(self, rule: Any, message: str, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message, details=details)
        self.rule = rule


class NotFoundError(DomainError):
    code = "NOT_FOUND"
    status_code = 404


class ConflictError(DomainError):
    code = "CONFLICT"
    status_code = 409


class AuthenticationError(DomainError):
    """Raised when credentials or tokens are invalid."""

    code = "UNAUTHORIZED"
    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "FORBIDDEN"
    status_code = 403
