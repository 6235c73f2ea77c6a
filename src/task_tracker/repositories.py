from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from threading import RLock
from typing import Dict, List, Optional

from .errors import Conflict, InvalidInput
from .models import TaskEntity, UserEntity
from .schemas import TaskPatch
from .settings import Settings
from .utils import new_id, normalize_email, utcnow


def require_title(title: Optional[str]) -> str:
    """Return the trimmed title, or raise InvalidInput when nothing is left."""
    s = (title or "").strip()
    if not s:
        raise InvalidInput("title is required")
    return s


# PUBLIC_INTERFACE
class TaskRepository(ABC):
    """
    Task storage contract. Every read that returns more than one task is scoped
    by owner; single-record reads are by id and the caller checks ownership.
    """

    @abstractmethod
    def create(self, owner_id: str, title: str) -> TaskEntity:
        """Create and return a new pending task. Raises InvalidInput on a blank title."""

    @abstractmethod
    def list_by_owner(self, owner_id: str) -> List[TaskEntity]:
        """Return the owner's tasks, newest first."""

    @abstractmethod
    def find_by_id(self, task_id: str) -> Optional[TaskEntity]:
        """Return a task by id, or None if not found."""

    @abstractmethod
    def update(self, task_id: str, patch: TaskPatch) -> Optional[TaskEntity]:
        """Apply the set fields of patch. Return the updated task or None if not found."""

    @abstractmethod
    def delete_by_id(self, task_id: str) -> bool:
        """Delete a task by id. Return True if deleted, False if not found."""


# PUBLIC_INTERFACE
class UserRepository(ABC):
    """User account storage contract. Emails are unique (case-insensitive)."""

    @abstractmethod
    def create(self, name: str, email: str, password_hash: str, password_salt: str) -> UserEntity:
        """Create a user. Raises Conflict if the email is taken."""

    @abstractmethod
    def find_by_id(self, user_id: str) -> Optional[UserEntity]:
        """Return a user by id, or None."""

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[UserEntity]:
        """Return a user by email, or None."""

    @abstractmethod
    def update(self, user_id: str, changes: Dict[str, str]) -> Optional[UserEntity]:
        """
        Update name and/or email. Raises Conflict if the new email belongs to
        another user. Returns None if the user does not exist.
        """


class InMemoryTaskRepository(TaskRepository):
    """
    Thread-safe in-memory task store suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[str, TaskEntity] = {}

    def create(self, owner_id: str, title: str) -> TaskEntity:
        now = utcnow()
        entity: TaskEntity = {
            "id": new_id(),
            "owner_id": owner_id,
            "title": require_title(title),
            "completed": False,
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            self._items[entity["id"]] = entity
        return entity.copy()  # type: ignore[return-value]

    def list_by_owner(self, owner_id: str) -> List[TaskEntity]:
        with self._lock:
            # dicts keep insertion order, so reversing gives newest first
            return [t.copy() for t in reversed(list(self._items.values())) if t["owner_id"] == owner_id]  # type: ignore[misc]

    def find_by_id(self, task_id: str) -> Optional[TaskEntity]:
        with self._lock:
            item = self._items.get(task_id)
            return None if item is None else item.copy()  # type: ignore[return-value]

    def update(self, task_id: str, patch: TaskPatch) -> Optional[TaskEntity]:
        with self._lock:
            existing = self._items.get(task_id)
            if existing is None:
                return None

            updated = existing.copy()
            if patch.title is not None:
                updated["title"] = patch.title
            if patch.completed is not None:
                updated["completed"] = patch.completed
            updated["updated_at"] = utcnow()

            self._items[task_id] = updated  # type: ignore[assignment]
            return updated.copy()  # type: ignore[return-value]

    def delete_by_id(self, task_id: str) -> bool:
        with self._lock:
            return self._items.pop(task_id, None) is not None


class InMemoryUserRepository(UserRepository):
    """Thread-safe in-memory user store."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._users: Dict[str, UserEntity] = {}

    def _id_for_email(self, email: str) -> Optional[str]:
        for user in self._users.values():
            if user["email"] == email:
                return user["id"]
        return None

    def create(self, name: str, email: str, password_hash: str, password_salt: str) -> UserEntity:
        email = normalize_email(email)
        with self._lock:
            if self._id_for_email(email) is not None:
                raise Conflict("Email is already registered")
            user: UserEntity = {
                "id": new_id(),
                "name": name,
                "email": email,
                "password_hash": password_hash,
                "password_salt": password_salt,
                "created_at": utcnow(),
            }
            self._users[user["id"]] = user
            return user.copy()  # type: ignore[return-value]

    def find_by_id(self, user_id: str) -> Optional[UserEntity]:
        with self._lock:
            user = self._users.get(user_id)
            return None if user is None else user.copy()  # type: ignore[return-value]

    def find_by_email(self, email: str) -> Optional[UserEntity]:
        with self._lock:
            user_id = self._id_for_email(normalize_email(email))
            return None if user_id is None else self._users[user_id].copy()  # type: ignore[return-value]

    def update(self, user_id: str, changes: Dict[str, str]) -> Optional[UserEntity]:
        with self._lock:
            existing = self._users.get(user_id)
            if existing is None:
                return None
            updated = existing.copy()
            if "name" in changes:
                updated["name"] = changes["name"]
            if "email" in changes:
                email = normalize_email(changes["email"])
                owner = self._id_for_email(email)
                if owner is not None and owner != user_id:
                    raise Conflict("Email is already registered")
                updated["email"] = email
            self._users[user_id] = updated  # type: ignore[assignment]
            return updated.copy()  # type: ignore[return-value]


@dataclass(frozen=True)
class Stores:
    """The pair of stores an application instance works against."""

    tasks: TaskRepository
    users: UserRepository


# PUBLIC_INTERFACE
def build_stores(settings: Settings) -> Stores:
    """
    Factory returning the configured stores based on settings.
    - memory: in-memory stores (state lives as long as the process)
    - sqlite: SQLite stores sharing one database file
    """
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteTaskRepository, SQLiteUserRepository

        return Stores(
            tasks=SQLiteTaskRepository(settings.sqlite_db_path),
            users=SQLiteUserRepository(settings.sqlite_db_path),
        )
    return Stores(tasks=InMemoryTaskRepository(), users=InMemoryUserRepository())
