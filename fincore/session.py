"""Explicit session lifecycle for the dashboard.

The auth provider is injected as an ``AuthBackend``; ``SessionManager`` owns the
current session and notifies subscribers when it changes.
"""
import hashlib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from fincore.functional import validate_password_change

logger = logging.getLogger(__name__)

EMAIL_DOMAIN = "temp.local"


class AuthError(Exception):
    """Raised by an auth backend when a request is rejected."""


@dataclass(frozen=True)
class Session:
    user_id: str
    email: str
    started_at: str

    @property
    def username(self) -> str:
        return self.email.split("@")[0]


def email_for(username: str) -> str:
    return f"{username}@{EMAIL_DOMAIN}"


class AuthBackend(ABC):

    @abstractmethod
    def sign_up(self, email: str, password: str) -> str:
        """Create an account and return its user id."""

    @abstractmethod
    def sign_in(self, email: str, password: str) -> str:
        """Check credentials and return the user id."""

    @abstractmethod
    def update_password(self, email: str, current_password: str, new_password: str) -> None:
        pass

    def sign_out(self, email: str) -> None:
        pass


class InMemoryAuthBackend(AuthBackend):

    def __init__(self):
        self._users: Dict[str, tuple[str, str]] = {}

    @staticmethod
    def _digest(password: str) -> str:
        return hashlib.sha256(password.encode("utf-8")).hexdigest()

    def sign_up(self, email: str, password: str) -> str:
        if email in self._users:
            raise AuthError(f"User already registered: {email}")
        user_id = str(uuid4())
        self._users[email] = (user_id, self._digest(password))
        return user_id

    def sign_in(self, email: str, password: str) -> str:
        user = self._users.get(email)
        if user is None or user[1] != self._digest(password):
            raise AuthError("Invalid login credentials")
        return user[0]

    def update_password(self, email: str, current_password: str, new_password: str) -> None:
        user_id = self.sign_in(email, current_password)
        self._users[email] = (user_id, self._digest(new_password))


class SessionManager:

    def __init__(self, backend: AuthBackend):
        self._backend = backend
        self._session: Optional[Session] = None
        self._listeners: List[Callable[[Optional[Session]], None]] = []

    def on_change(self, callback: Callable[[Optional[Session]], None]) -> Callable[[], None]:
        """Subscribe to session changes; returns an unsubscribe function."""
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _unsubscribe

    def _set(self, session: Optional[Session]) -> None:
        self._session = session
        for listener in list(self._listeners):
            listener(session)

    def current_session(self) -> Optional[Session]:
        return self._session

    def sign_up(self, username: str, password: str) -> str:
        email = email_for(username)
        try:
            user_id = self._backend.sign_up(email, password)
        except AuthError:
            logger.warning("Sign-up failed for %s", username)
            raise
        logger.info("Registered %s", username)
        return user_id

    def login(self, username: str, password: str) -> Session:
        email = email_for(username)
        try:
            user_id = self._backend.sign_in(email, password)
        except AuthError:
            logger.warning("Login failed for %s", username)
            raise
        session = Session(
            user_id=user_id,
            email=email,
            started_at=datetime.now(timezone.utc).isoformat(),
        )
        self._set(session)
        logger.info("Logged in %s", username)
        return session

    def logout(self) -> None:
        if self._session is None:
            return
        self._backend.sign_out(self._session.email)
        logger.info("Logged out %s", self._session.username)
        self._set(None)

    def change_password(self, current_password: str, new_password: str, confirm_password: str) -> None:
        if self._session is None:
            raise AuthError("Not logged in")
        check = validate_password_change(new_password, confirm_password)
        if check.is_left():
            raise AuthError(check.get_error()["message"])
        self._backend.update_password(self._session.email, current_password, new_password)
        logger.info("Password changed for %s", self._session.username)
