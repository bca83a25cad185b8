from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an admin or a worker.

    ``password_hash`` never leaves the service layer; controllers use
    ``public_view()``.
    """

    user_id: int
    name: str
    mail: str
    password_hash: str
    role: Role
    active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def public_view(self) -> dict[str, Any]:
        return {
            "id": self.user_id,
            "name": self.name,
            "mail": self.mail,
            "userType": self.role.value,
            "active": self.active,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
