from __future__ import annotations

import logging
from typing import Any, Optional

audit_logger = logging.getLogger("timesheet_system.audit")


def log_audit(action: str, *, user_id: Optional[int], entity: str, entity_id: Any, **payload: Any) -> None:
    """Record a successful write; the line format is informational only."""
    audit_logger.info(
        "action=%s user_id=%s entity=%s entity_id=%s payload=%s",
        action,
        user_id,
        entity,
        entity_id,
        payload,
    )
