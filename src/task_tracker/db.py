from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Generator, List, Optional

from .errors import Conflict, ServerError
from .models import TaskEntity, UserEntity
from .repositories import TaskRepository, UserRepository, require_title
from .schemas import TaskPatch
from .utils import new_id, normalize_email, utcnow

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL DEFAULT '',
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    password_salt TEXT NOT NULL,
    created_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS tasks (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL UNIQUE,
    owner_id TEXT NOT NULL,
    title TEXT NOT NULL,
    completed INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_tasks_owner_id ON tasks(owner_id);
"""


class _SQLiteStore:
    """
    Shared connection handling. Each call gets its own connection and
    transaction; sqlite errors surface as ServerError with the cause chained.
    """

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        with self._conn() as conn:
            conn.executescript(_SCHEMA)

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as exc:
            logger.exception("Could not open database %s", self._db_path)
            raise ServerError("Storage unavailable") from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.IntegrityError:
            conn.rollback()
            raise
        except sqlite3.Error as exc:
            conn.rollback()
            logger.exception("Database operation failed")
            raise ServerError("Storage failure") from exc
        finally:
            conn.close()


def _parse_dt(s: str) -> datetime:
    return datetime.fromisoformat(s)


class SQLiteTaskRepository(_SQLiteStore, TaskRepository):
    """
    Lightweight SQLite task store.
    """

    def _row_to_entity(self, row: sqlite3.Row) -> TaskEntity:
        return {
            "id": str(row["id"]),
            "owner_id": str(row["owner_id"]),
            "title": str(row["title"]),
            "completed": bool(row["completed"]),
            "created_at": _parse_dt(row["created_at"]),
            "updated_at": _parse_dt(row["updated_at"]),
        }

    def _select(self, conn: sqlite3.Connection, task_id: str) -> Optional[sqlite3.Row]:
        return conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()

    def create(self, owner_id: str, title: str) -> TaskEntity:
        clean = require_title(title)
        task_id = new_id()
        now = utcnow().isoformat()
        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO tasks (id, owner_id, title, completed, created_at, updated_at)
                VALUES (?, ?, ?, 0, ?, ?)
                """,
                (task_id, owner_id, clean, now, now),
            )
            row = self._select(conn, task_id)
            assert row is not None
            return self._row_to_entity(row)

    def list_by_owner(self, owner_id: str) -> List[TaskEntity]:
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT * FROM tasks WHERE owner_id = ? ORDER BY seq DESC", (owner_id,)
            ).fetchall()
            return [self._row_to_entity(r) for r in rows]

    def find_by_id(self, task_id: str) -> Optional[TaskEntity]:
        with self._conn() as conn:
            row = self._select(conn, task_id)
            return self._row_to_entity(row) if row else None

    def update(self, task_id: str, patch: TaskPatch) -> Optional[TaskEntity]:
        assignments = []
        params: list = []
        if patch.title is not None:
            assignments.append("title = ?")
            params.append(patch.title)
        if patch.completed is not None:
            assignments.append("completed = ?")
            params.append(1 if patch.completed else 0)
        assignments.append("updated_at = ?")
        params.append(utcnow().isoformat())

        with self._conn() as conn:
            cur = conn.execute(
                f"UPDATE tasks SET {', '.join(assignments)} WHERE id = ?", [*params, task_id]
            )
            if cur.rowcount == 0:
                return None
            row = self._select(conn, task_id)
            assert row is not None
            return self._row_to_entity(row)

    def delete_by_id(self, task_id: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            return cur.rowcount > 0


class SQLiteUserRepository(_SQLiteStore, UserRepository):
    """
    SQLite user store. The UNIQUE constraint on email backs the Conflict error.
    """

    def _row_to_entity(self, row: sqlite3.Row) -> UserEntity:
        return {
            "id": str(row["id"]),
            "name": str(row["name"]),
            "email": str(row["email"]),
            "password_hash": str(row["password_hash"]),
            "password_salt": str(row["password_salt"]),
            "created_at": _parse_dt(row["created_at"]),
        }

    def create(self, name: str, email: str, password_hash: str, password_salt: str) -> UserEntity:
        user_id = new_id()
        try:
            with self._conn() as conn:
                conn.execute(
                    """
                    INSERT INTO users (id, name, email, password_hash, password_salt, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (user_id, name, normalize_email(email), password_hash, password_salt, utcnow().isoformat()),
                )
                row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
                assert row is not None
                return self._row_to_entity(row)
        except sqlite3.IntegrityError as exc:
            raise Conflict("Email is already registered") from exc

    def find_by_id(self, user_id: str) -> Optional[UserEntity]:
        with self._conn() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            return self._row_to_entity(row) if row else None

    def find_by_email(self, email: str) -> Optional[UserEntity]:
        with self._conn() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE email = ?", (normalize_email(email),)
            ).fetchone()
            return self._row_to_entity(row) if row else None

    def update(self, user_id: str, changes: Dict[str, str]) -> Optional[UserEntity]:
        assignments = []
        params: list = []
        if "name" in changes:
            assignments.append("name = ?")
            params.append(changes["name"])
        if "email" in changes:
            assignments.append("email = ?")
            params.append(normalize_email(changes["email"]))

        try:
            with self._conn() as conn:
                if assignments:
                    conn.execute(
                        f"UPDATE users SET {', '.join(assignments)} WHERE id = ?", [*params, user_id]
                    )
                row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
                return self._row_to_entity(row) if row else None
        except sqlite3.IntegrityError as exc:
            raise Conflict("Email is already registered") from exc
