from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    Storage-level representation of a task.

    Fields:
    - id: Opaque unique identifier (uuid hex), immutable
    - owner_id: Id of the user who created the task, immutable
    - title: Trimmed, non-empty title
    - completed: Completion flag
    - created_at: Creation timestamp (UTC)
    - updated_at: Last update timestamp (UTC)
    """

    id: str
    owner_id: str
    title: str
    completed: bool
    created_at: datetime
    updated_at: datetime


# PUBLIC_INTERFACE
class UserEntity(TypedDict):
    """
    Storage-level representation of a user account.

    password_hash and password_salt never leave the server.
    """

    id: str
    name: str
    email: str
    password_hash: str
    password_salt: str
    created_at: datetime
