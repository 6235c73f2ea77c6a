from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError

from ..schemas import AuthResponse

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class Session(BaseModel):
    """
    The logged-in identity on the client: who we are and the token proving it.
    name/email mirror the last known profile.
    """

    user_id: str
    token: str
    name: str = ""
    email: str = ""

    @classmethod
    def from_auth(cls, auth: AuthResponse) -> "Session":
        return cls(user_id=auth.id, token=auth.token, name=auth.name, email=auth.email)


class SessionStore(ABC):
    """Durable home of the identity record between runs."""

    @abstractmethod
    def load(self) -> Optional[Session]:
        """Return the saved session, or None."""

    @abstractmethod
    def save(self, session: Session) -> None:
        """Persist the session, replacing any previous one."""

    @abstractmethod
    def clear(self) -> None:
        """Forget the saved session."""


class MemorySessionStore(SessionStore):
    def __init__(self, session: Optional[Session] = None) -> None:
        self._session = session

    def load(self) -> Optional[Session]:
        return self._session

    def save(self, session: Session) -> None:
        self._session = session

    def clear(self) -> None:
        self._session = None


class FileSessionStore(SessionStore):
    """
    JSON file store. A missing or unreadable file means "not logged in".
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def load(self) -> Optional[Session]:
        if not self._path.exists():
            return None
        try:
            return Session.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self._path, exc)
            return None

    def save(self, session: Session) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(session.model_dump_json(), encoding="utf-8")

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
