"""Session service — current user, login/logout, and session lifecycle.

Lifecycle:
  - ``hydrate()`` restores token + user from durable storage at startup
  - ``login()`` / ``set_user()`` write storage and memory
  - ``logout()`` / ``invalidate()`` clear storage and memory, then notify
    subscribers (the app redirects to the login page on ``invalidated``)
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Optional, Union

from jose import JWTError, jwt

from hrms_client.auth.api import AuthApi
from hrms_client.auth.schemas import LoginResponse, User
from hrms_client.common.constants import ROLE_KEY, TOKEN_KEY, USER_KEY, UserRole
from hrms_client.common.storage import FileStorage

logger = logging.getLogger(__name__)

SessionListener = Callable[[str, Optional[User]], None]


def token_expired(token: str, *, now: Optional[float] = None) -> bool:
    """True if *token* is a JWT whose ``exp`` claim has passed.

    Claims are read without verification; opaque tokens never count as
    expired (only the backend can reject them).
    """
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return False
    exp = claims.get("exp")
    if not isinstance(exp, (int, float)):
        return False
    return exp <= (now if now is not None else time.time())


class SessionService:
    """Process-wide session state, injected wherever identity is needed."""

    def __init__(self, storage: FileStorage, auth_api: AuthApi) -> None:
        self.storage = storage
        self.auth_api = auth_api
        self._user: Optional[User] = None
        self._listeners: list[SessionListener] = []

    # ── State ───────────────────────────────────────────────────────

    @property
    def token(self) -> Optional[str]:
        return self.storage.get(TOKEN_KEY)

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def role(self) -> Optional[UserRole]:
        if self._user is not None and self._user.role:
            return self._user.user_role
        return UserRole.parse(self.storage.get(ROLE_KEY))

    @property
    def employee_id(self) -> Optional[str]:
        return self._user.id if self._user is not None else None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and self._user is not None

    # ── Lifecycle ───────────────────────────────────────────────────

    def hydrate(self) -> Optional[User]:
        """Restore the session persisted by a previous run."""
        token = self.token
        raw_user = self.storage.get(USER_KEY)
        if not token:
            self._user = None
            return None
        if token_expired(token):
            logger.info("Stored token has expired; clearing session")
            self.storage.clear_session()
            self._user = None
            return None

        user = _parse_stored_user(raw_user)
        if user is None:
            logger.warning("Stored session has a token but no readable user; clearing it")
            self.storage.clear_session()
            self._user = None
            return None

        if not user.role and self.storage.get(ROLE_KEY):
            user.role = self.storage.get(ROLE_KEY)
        self._user = user
        self._emit("restored")
        return user

    async def login(self, email: str, password: str) -> User:
        """Authenticate and persist the session.

        Errors from the backend propagate untouched and nothing is stored.
        """
        payload = await self.auth_api.login(email, password)
        response = LoginResponse.model_validate(payload)
        user = response.user
        if not user.role and response.role:
            user.role = response.role

        self.storage.set(TOKEN_KEY, response.token)
        self._persist_user(user)
        self._user = user
        logger.info("Signed in as %s (%s)", user.email or user.id, user.role)
        self._emit("login")
        return user

    def logout(self) -> None:
        self._teardown("logout")

    def invalidate(self) -> None:
        """Teardown after the backend rejected the token."""
        self._teardown("invalidated")

    def set_user(self, user: Union[User, dict[str, Any]]) -> User:
        """Replace the current user in place (e.g. after a profile edit)."""
        if isinstance(user, dict):
            user = User.model_validate(user)
        self._persist_user(user)
        self._user = user
        self._emit("user_updated")
        return user

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register *listener(event, user)*; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ── Internal ────────────────────────────────────────────────────

    def _persist_user(self, user: User) -> None:
        self.storage.set(USER_KEY, json.dumps(user.to_storage()))
        if user.role:
            self.storage.set(ROLE_KEY, user.role)
        else:
            self.storage.remove(ROLE_KEY)

    def _teardown(self, event: str) -> None:
        self.storage.clear_session()
        was_signed_in = self._user is not None
        self._user = None
        if was_signed_in or event == "invalidated":
            logger.info("Session ended (%s)", event)
        self._emit(event)

    def _emit(self, event: str) -> None:
        for listener in list(self._listeners):
            listener(event, self._user)


def _parse_stored_user(raw: Optional[str]) -> Optional[User]:
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    return User.model_validate(data)
