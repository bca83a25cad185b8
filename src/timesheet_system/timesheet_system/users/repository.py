from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_mail(self, mail: str) -> Optional[User]:
        raise NotImplementedError

    def list_users(self, *, active: Optional[bool] = True, role: Optional[Role] = None) -> Sequence[User]:
        """Newest first."""

        raise NotImplementedError

    def create_user(self, *, name: str, mail: str, password_hash: str, role: Role) -> int:
        raise NotImplementedError

    def update_user(self, user_id: int, *, name: str, mail: str, role: Role, active: bool) -> bool:
        raise NotImplementedError

    def set_active(self, user_id: int, *, active: bool) -> bool:
        raise NotImplementedError

    def set_password_hash(self, user_id: int, password_hash: str) -> bool:
        raise NotImplementedError
