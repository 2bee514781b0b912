# src/tasktrack/users/directory.py

from __future__ import annotations

"""
User directory and login sessions.

Authentication here is a placeholder: passwords are kept as given and
compared for equality. What matters for the core is that identity is always
explicit: a login returns a session token, and every API call resolves that
token to a user id instead of reading some ambient "current user".
"""

import logging
import secrets
import threading
from urllib.parse import quote

from ..core.errors import NotFoundError, ValidationError
from ..tasks.task_models import Role, User
from ..tasks.task_store import EntityStore

logger = logging.getLogger(__name__)


def avatar_url_for(name: str) -> str:
    return f"https://picsum.photos/seed/{quote(name)}/100"


class UserDirectory:
    def __init__(self, store: EntityStore) -> None:
        self._store = store
        self._passwords: dict[str, str] = {}

    def register(
        self,
        *,
        name: str,
        email: str,
        role: Role | str,
        password: str,
        avatar_url: str | None = None,
    ) -> User:
        name = (name or "").strip()
        email = (email or "").strip()
        if not name or not email or not password:
            raise ValidationError("Name, email and password are required")
        role = Role.parse(role)

        with self._store.transaction():
            if self._store.find_user_by_email(email) is not None:
                raise ValidationError("Email already exists")
            user = self._store.add_user(
                User(
                    id=self._store.next_user_id(),
                    name=name,
                    email=email,
                    role=role,
                    avatar_url=avatar_url or avatar_url_for(name),
                )
            )
            self._passwords[email.lower()] = password

        logger.info("User registered id=%s email=%s role=%s", user.id, user.email, role.value)
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self._store.find_user_by_email(email)
        if user is None or self._passwords.get(user.email.lower()) != password:
            logger.info("Login rejected email=%s", email)
            raise ValidationError("Invalid credentials")
        return user

    def get(self, user_id: int) -> User:
        user = self._store.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def list_users(self) -> list[User]:
        return self._store.list_users()

    def by_id(self) -> dict[int, User]:
        return {u.id: u for u in self._store.list_users()}


class SessionRegistry:
    """token -> user id. Tokens are opaque and random."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[str, int] = {}

    def open(self, user: User) -> str:
        token = secrets.token_urlsafe(24)
        with self._lock:
            self._sessions[token] = user.id
        logger.debug("Session opened user=%s", user.id)
        return token

    def resolve(self, token: str | None) -> int:
        with self._lock:
            user_id = self._sessions.get(token or "")
        if user_id is None:
            raise NotFoundError("Not authenticated")
        return user_id

    def close(self, token: str | None) -> None:
        with self._lock:
            user_id = self._sessions.pop(token or "", None)
        if user_id is not None:
            logger.debug("Session closed user=%s", user_id)
