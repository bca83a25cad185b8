from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date
from .time_utils import TIME_PATTERN

E = TypeVar("E", bound=Enum)


def require_non_empty(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: Any, field_name: str, min_len: int) -> str:
    if not isinstance(value, str) or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_id(value: Any, field_name: str) -> int:
    """Accept ids as JSON numbers or digit strings."""
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a valid number")
    if isinstance(value, int) and value > 0:
        return value
    if isinstance(value, str) and value.isdigit() and int(value) > 0:
        return int(value)
    raise ValidationError(f"{field_name} must be a valid number")


def optional_id(value: Any, field_name: str) -> Optional[int]:
    if value is None:
        return None
    return require_id(value, field_name)


def optional_time_text(value: Any, field_name: str) -> Optional[str]:
    """A ``HH:MM`` string or None; empty strings count as absent."""
    if value is None or value == "":
        return None
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise ValidationError(f"{field_name} must be in HH:mm format (24-hour)")
    return value


def require_time_text(value: Any, field_name: str) -> str:
    text = optional_time_text(value, field_name)
    if text is None:
        raise ValidationError(f"{field_name} is required")
    return text


def require_date(value: Any, field_name: str) -> date:
    try:
        return parse_iso_date(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name}: invalid date format. Expected YYYY-MM-DD")


def optional_date(value: Any, field_name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    return require_date(value, field_name)


def require_enum(value: Any, enum_cls: Type[E], field_name: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def optional_enum(value: Any, enum_cls: Type[E], field_name: str) -> Optional[E]:
    if value is None:
        return None
    return require_enum(value, enum_cls, field_name)


def optional_bool(value: Any, field_name: str) -> Optional[bool]:
    if value is None or isinstance(value, bool):
        return value
    raise ValidationError(f"{field_name} must be a boolean")


def optional_text(value: Any, field_name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    return value


def query_flag(value: Optional[str]) -> Optional[bool]:
    """Interpret ``?active=true|false`` style query parameters."""
    if value is None or value == "":
        return None
    return value.lower() in {"1", "true", "yes"}
