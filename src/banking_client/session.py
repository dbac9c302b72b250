"""Session persistence for the portal.

A session is the bearer token plus the profile of the logged-in user. Stores
implement a small protocol so that the same client works from a terminal
(file-backed store), in tests (memory store) and inside Streamlit (a store
backed by ``st.session_state``, see ``ui.state``).

Usage:
    from banking_client.session import FileSessionStore

    store = FileSessionStore(config.session_path)
    session = store.load()
"""

import json
import logging
import os
from datetime import UTC, datetime
from pathlib import Path
from threading import Lock
from typing import Protocol

import jwt
from pydantic import BaseModel, ValidationError

from banking_client.roles import Role
from banking_client.schemas import AuthResponse, User

logger = logging.getLogger(__name__)


class Session(BaseModel):
    """Authenticated session: bearer token and user profile."""

    token: str
    user: User

    @classmethod
    def from_auth_response(cls, auth: AuthResponse) -> "Session":
        return cls(token=auth.token, user=auth.to_user())

    @property
    def roles(self) -> frozenset[Role]:
        return self.user.roles

    @property
    def expires_at(self) -> datetime | None:
        """Expiry from the token's ``exp`` claim, if it has one.

        The signature is not verified here; the backend does that on every
        request.
        """
        try:
            claims = jwt.decode(
                self.token,
                options={"verify_signature": False, "verify_exp": False},
            )
        except jwt.PyJWTError:
            return None
        exp = claims.get("exp")
        if exp is None:
            return None
        return datetime.fromtimestamp(int(exp), tz=UTC)

    def is_expired(self, now: datetime | None = None) -> bool:
        expires_at = self.expires_at
        if expires_at is None:
            return False
        return (now or datetime.now(UTC)) >= expires_at

    def to_json(self) -> str:
        return self.model_dump_json()


class SessionStore(Protocol):
    """Protocol for session persistence backends."""

    def load(self) -> Session | None:
        ...

    def save(self, session: Session) -> None:
        ...

    def clear(self) -> None:
        ...


class MemorySessionStore:
    """Process-local store."""

    def __init__(self, session: Session | None = None):
        self._session = session
        self._lock = Lock()

    def load(self) -> Session | None:
        with self._lock:
            return self._session

    def save(self, session: Session) -> None:
        with self._lock:
            self._session = session

    def clear(self) -> None:
        with self._lock:
            self._session = None


class FileSessionStore:
    """Store that persists the session as JSON on disk."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = Lock()

    def load(self) -> Session | None:
        with self._lock:
            if not self.path.exists():
                return None
            try:
                return Session.model_validate_json(self.path.read_text())
            except (OSError, ValidationError, json.JSONDecodeError) as e:
                logger.warning("Discarding unreadable session file %s: %s", self.path, e)
                return None

    def save(self, session: Session) -> None:
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # the token never touches disk with a wider mode than 0600
            tmp_path = self.path.with_name(self.path.name + ".tmp")
            tmp_path.unlink(missing_ok=True)
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
            with os.fdopen(fd, "w") as f:
                f.write(session.to_json())
            os.replace(tmp_path, self.path)

    def clear(self) -> None:
        with self._lock:
            self.path.unlink(missing_ok=True)


def load_active_session(store: SessionStore) -> Session | None:
    """Load the stored session, dropping it if its token has expired."""
    session = store.load()
    if session is None:
        return None
    if session.is_expired():
        logger.info("Stored session for %s has expired", session.user.username)
        store.clear()
        return None
    return session
