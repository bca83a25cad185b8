from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .exceptions import RuleViolationError


class RuleCode(str, Enum):
    """Closed set of consistency rule violations."""

    INVALID_FORMAT = "InvalidFormat"
    MISSING_TIMES = "MissingTimes"
    EXCLUSIVE_CONFLICT = "ExclusiveConflict"
    INVALID_RANGE = "InvalidRange"
    MIDNIGHT_CROSSING = "MidnightCrossing"
    OVERLAP_CONFLICT = "OverlapConflict"
    INSUFFICIENT_COVERAGE = "InsufficientCoverage"
    LOGS_EXIST_CONFLICT = "LogsExistConflict"


@dataclass(frozen=True)
class RuleResult:
    """Outcome of a rule check: either ok, or the first violated rule."""

    code: Optional[RuleCode] = None
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls) -> "RuleResult":
        return cls()

    @classmethod
    def fail(cls, code: RuleCode, message: str, **details: Any) -> "RuleResult":
        return cls(code=code, message=message, details=dict(details))

    @property
    def is_ok(self) -> bool:
        return self.code is None

    def raise_for_violation(self) -> None:
        if self.code is not None:
            raise RuleViolationError(self.code, self.message, details={"rule": self.code.value, **self.details})

