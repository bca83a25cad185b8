from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, Sequence

from jose import JWTError, jwt
from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.constants import DEFAULT_TOKEN_HOURS, JWT_ALGORITHM, MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthService:
    """Use case: log in with mail/password and resolve bearer tokens."""

    def __init__(
        self,
        users: UserRepository,
        *,
        secret: str,
        expires_hours: int = DEFAULT_TOKEN_HOURS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._users = users
        self._secret = secret
        self._expires_hours = int(expires_hours)
        self._clock = clock

    def login(self, mail: str, password: str) -> dict[str, Any]:
        user = self._users.get_by_mail(mail)
        if not user:
            raise AuthenticationError("Invalid credentials")
        if not user.active:
            raise AuthenticationError("Account is inactive")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # placeholder or corrupted hash values
            ok = False
        if not ok:
            raise AuthenticationError("Invalid credentials")

        logger.info("User %s logged in", user.user_id)
        return {"token": self.issue_token(user), "expiresInHours": self._expires_hours}

    def issue_token(self, user: User) -> str:
        now = self._clock()
        claims = {
            "sub": str(user.user_id),
            "role": user.role.value,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(hours=self._expires_hours)).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=JWT_ALGORITHM)

    def resolve_token(self, token: str) -> User:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[JWT_ALGORITHM])
        except JWTError:
            raise AuthenticationError("Invalid or expired token")

        subject = payload.get("sub")
        if not subject or not str(subject).isdigit():
            raise AuthenticationError("Invalid or expired token")

        user = self._users.get_by_id(int(subject))
        if not user or not user.active:
            raise AuthenticationError("User not found or inactive")
        return user


class UserService:
    """Use case: manage users (admin)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def list_users(self, *, active: Optional[bool] = True, role: Optional[Role] = None) -> Sequence[User]:
        return self._users.list_users(active=active, role=role)

    def get(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def create_user(self, *, name: str, mail: str, password: str, role: Role) -> int:
        name = require_non_empty(name, "name")
        mail = require_non_empty(mail, "mail").lower()
        require_min_length(password, "password", MIN_PASSWORD_LENGTH)

        if self._users.get_by_mail(mail):
            raise ConflictError("A user with this email address already exists.", details={"mail": mail})

        return self._users.create_user(
            name=name,
            mail=mail,
            password_hash=generate_password_hash(password),
            role=role,
        )

    def update_user(
        self,
        user_id: int,
        *,
        name: Optional[str] = None,
        mail: Optional[str] = None,
        role: Optional[Role] = None,
        active: Optional[bool] = None,
    ) -> User:
        """Partial update; passwords change only through ``reset_password``."""

        user = self.get(user_id)

        new_mail = user.mail if mail is None else require_non_empty(mail, "mail").lower()
        if new_mail != user.mail and self._users.get_by_mail(new_mail):
            raise ConflictError("Email already exists", details={"mail": "Email already exists"})

        new_name = user.name if name is None else require_non_empty(name, "name")
        new_role = user.role if role is None else role
        new_active = user.active if active is None else bool(active)

        self._users.update_user(user_id, name=new_name, mail=new_mail, role=new_role, active=new_active)
        return self.get(user_id)

    def deactivate(self, user_id: int) -> None:
        self.get(user_id)
        self._users.set_active(user_id, active=False)

    def reset_password(self, user_id: int, new_password: str) -> None:
        self.get(user_id)
        require_min_length(new_password, "newPassword", MIN_PASSWORD_LENGTH)
        self._users.set_password_hash(user_id, generate_password_hash(new_password))
