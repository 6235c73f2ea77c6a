from __future__ import annotations

import logging
from typing import List, Optional

from .auth import AuthContext, create_access_token, hash_password, verify_password
from .errors import Forbidden, InvalidInput, NotFound, Unauthenticated
from .models import TaskEntity, UserEntity
from .repositories import TaskRepository, UserRepository, require_title
from .schemas import AuthResponse, ProfileUpdate, TaskPatch
from .settings import Settings

logger = logging.getLogger(__name__)


class TaskService:
    """
    Ownership-enforcing operations over the task store. Every method takes the
    caller's AuthContext first; the owner is never read from request data.
    """

    def __init__(self, tasks: TaskRepository) -> None:
        self._tasks = tasks

    def _owned(self, ctx: AuthContext, task_id: str) -> TaskEntity:
        task = self._tasks.find_by_id(task_id)
        if task is None:
            raise NotFound("Task not found")
        if task["owner_id"] != ctx.user_id:
            logger.warning("User %s denied access to task %s", ctx.user_id, task_id)
            raise Forbidden("Not allowed to access this task")
        return task

    def create_task(self, ctx: AuthContext, title: str) -> TaskEntity:
        task = self._tasks.create(ctx.user_id, require_title(title))
        logger.info("User %s created task %s", ctx.user_id, task["id"])
        return task

    def list_tasks(self, ctx: AuthContext) -> List[TaskEntity]:
        return self._tasks.list_by_owner(ctx.user_id)

    def toggle_task(self, ctx: AuthContext, task_id: str) -> TaskEntity:
        task = self._owned(ctx, task_id)
        updated = self._tasks.update(task_id, TaskPatch(completed=not task["completed"]))
        if updated is None:
            # deleted between the read and the write
            raise NotFound("Task not found")
        logger.info("User %s set task %s completed=%s", ctx.user_id, task_id, updated["completed"])
        return updated

    def delete_task(self, ctx: AuthContext, task_id: str) -> None:
        self._owned(ctx, task_id)
        if not self._tasks.delete_by_id(task_id):
            raise NotFound("Task not found")
        logger.info("User %s deleted task %s", ctx.user_id, task_id)


class ProfileService:
    """Reads and updates the caller's own profile, and nobody else's."""

    def __init__(self, users: UserRepository) -> None:
        self._users = users

    def get_profile(self, ctx: AuthContext) -> UserEntity:
        user = self._users.find_by_id(ctx.user_id)
        if user is None:
            raise Unauthenticated("User no longer exists")
        return user

    def update_profile(self, ctx: AuthContext, payload: ProfileUpdate) -> UserEntity:
        changes = payload.changes()
        user = self._users.update(ctx.user_id, changes)
        if user is None:
            raise Unauthenticated("User no longer exists")
        if changes:
            logger.info("User %s updated profile fields %s", ctx.user_id, sorted(changes))
        return user


class AccountService:
    """Registration and sign-in; issues the tokens the identity gate accepts."""

    def __init__(self, users: UserRepository, settings: Settings) -> None:
        self._users = users
        self._settings = settings

    def _session_for(self, user: UserEntity) -> AuthResponse:
        return AuthResponse(
            id=user["id"],
            name=user["name"],
            email=user["email"],
            token=create_access_token(user["id"], self._settings),
        )

    def register(self, name: str, email: str, password: str) -> AuthResponse:
        if not email.strip() or not password:
            raise InvalidInput("email and password are required")
        pwd_hash, pwd_salt = hash_password(password)
        user = self._users.create(name.strip(), email, pwd_hash, pwd_salt)
        logger.info("Registered user %s", user["id"])
        return self._session_for(user)

    def login(self, email: str, password: str) -> AuthResponse:
        user: Optional[UserEntity] = self._users.find_by_email(email)
        if user is None or not verify_password(password, user["password_hash"], user["password_salt"]):
            raise Unauthenticated("Invalid email or password")
        return self._session_for(user)
