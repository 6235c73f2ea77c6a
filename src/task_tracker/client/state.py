"""
Client-side mirror of the server's task and profile state.

The mirror only ever holds confirmed server state: every mutation is sent
first and applied locally once the server answers. Filtering and search are
derived on demand by pure functions and never stored.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Literal, Optional, Sequence, get_args

from ..errors import InvalidInput, TrackerError, Unauthenticated
from ..schemas import ProfileOut, TaskOut
from .api import TrackerApi
from .session import Session, SessionStore

logger = logging.getLogger(__name__)

FilterStatus = Literal["all", "completed", "pending"]
FILTER_STATUSES = get_args(FilterStatus)


# PUBLIC_INTERFACE
def filter_tasks(tasks: Sequence[TaskOut], search_term: str, filter_status: FilterStatus) -> List[TaskOut]:
    """
    Tasks whose title contains search_term (case-insensitive) and whose
    completion matches filter_status, in their original order.
    """
    needle = search_term.lower()
    out = []
    for task in tasks:
        if needle not in task.title.lower():
            continue
        if filter_status == "completed" and not task.completed:
            continue
        if filter_status == "pending" and task.completed:
            continue
        out.append(task)
    return out


@dataclass(frozen=True)
class TaskStats:
    total: int
    completed: int
    pending: int


def task_stats(tasks: Sequence[TaskOut]) -> TaskStats:
    done = sum(1 for t in tasks if t.completed)
    return TaskStats(total=len(tasks), completed=done, pending=len(tasks) - done)


class ClientSyncState:
    """
    Session lifecycle plus the local task/profile mirror.

    login/register create the session, logout destroys it and empties the
    mirror. Failed operations raise the typed error and leave the mirror as it
    was.
    """

    def __init__(self, api: TrackerApi, session_store: SessionStore) -> None:
        self._api = api
        self._store = session_store
        self.session: Optional[Session] = None
        self.tasks: List[TaskOut] = []
        self.profile: Optional[ProfileOut] = None
        self.loaded = False
        self.search_term = ""
        self.filter_status: FilterStatus = "all"
        self.draft_title = ""

    # -- session lifecycle ------------------------------------------------

    def login(self, email: str, password: str) -> Session:
        self._begin(self._api.login(email, password))
        self.sync()
        assert self.session is not None
        return self.session

    def register(self, name: str, email: str, password: str) -> Session:
        self._begin(self._api.register(name, email, password))
        self.sync()
        assert self.session is not None
        return self.session

    def restore(self) -> bool:
        """Resume a saved session. Returns False when there is none."""
        session = self._store.load()
        if session is None:
            return False
        self._begin(session)
        self.sync()
        return True

    def logout(self) -> None:
        self._store.clear()
        self.session = None
        self._reset_mirror()

    def _begin(self, session: Session) -> None:
        self._store.save(session)
        self.session = session
        self._reset_mirror()

    def _reset_mirror(self) -> None:
        self.tasks = []
        self.profile = None
        self.loaded = False
        self.search_term = ""
        self.filter_status = "all"
        self.draft_title = ""

    def _require_session(self) -> Session:
        if self.session is None:
            raise Unauthenticated("Not logged in")
        return self.session

    # -- server round trips -------------------------------------------------

    def sync(self) -> None:
        """
        Fetch profile and tasks and replace the mirror with them. Until the
        first sync succeeds the state stays in loading mode.

        A token the server rejects ends the session, saved record included.
        """
        session = self._require_session()
        try:
            profile = self._api.get_profile(session)
            tasks = self._api.list_tasks(session)
        except Unauthenticated:
            logger.warning("Server rejected the session of user %s; logging out", session.user_id)
            self.logout()
            raise
        self.profile = profile
        self.tasks = tasks
        self.loaded = True

    def add_task(self, title: Optional[str] = None) -> Optional[TaskOut]:
        """
        Create a task from title (or the draft buffer). Blank titles are
        ignored without a request.
        """
        text = self.draft_title if title is None else title
        if not text.strip():
            return None
        session = self._require_session()
        try:
            created = self._api.create_task(session, text)
        except TrackerError as exc:
            logger.warning("Creating task failed: %s", exc)
            raise
        self.tasks = [created, *self.tasks]
        self.draft_title = ""
        return created

    def toggle_task(self, task: TaskOut) -> TaskOut:
        session = self._require_session()
        try:
            updated = self._api.toggle_task(session, task.id)
        except TrackerError as exc:
            logger.warning("Toggling task %s failed: %s", task.id, exc)
            raise
        self.tasks = [updated if t.id == updated.id else t for t in self.tasks]
        return updated

    def remove_task(self, task_id: str) -> None:
        session = self._require_session()
        try:
            self._api.delete_task(session, task_id)
        except TrackerError as exc:
            logger.warning("Deleting task %s failed: %s", task_id, exc)
            raise
        self.tasks = [t for t in self.tasks if t.id != task_id]

    def update_profile(self, name: str, email: str) -> ProfileOut:
        """
        Both fields are required here; the check happens before any request.
        On success the profile and the saved session record are refreshed.
        """
        if not name.strip() or not email.strip():
            raise InvalidInput("Name and email cannot be empty.")
        session = self._require_session()
        try:
            updated = self._api.update_profile(session, name.strip(), email.strip())
        except TrackerError as exc:
            logger.warning("Updating profile failed: %s", exc)
            raise

        self.profile = ProfileOut(id=session.user_id, name=updated.name, email=updated.email)
        self.session = session.model_copy(update={"name": updated.name, "email": updated.email})
        self._store.save(self.session)
        return self.profile

    # -- view inputs and derived views ----------------------------------------

    def set_search(self, term: str) -> None:
        self.search_term = term

    def set_filter(self, status: str) -> None:
        if status not in FILTER_STATUSES:
            raise InvalidInput(f"filter must be one of {', '.join(FILTER_STATUSES)}")
        self.filter_status = status  # type: ignore[assignment]

    @property
    def filtered_tasks(self) -> List[TaskOut]:
        if not self.loaded:
            return []
        return filter_tasks(self.tasks, self.search_term, self.filter_status)

    @property
    def completed_tasks(self) -> List[TaskOut]:
        return [t for t in self.filtered_tasks if t.completed]

    @property
    def pending_tasks(self) -> List[TaskOut]:
        return [t for t in self.filtered_tasks if not t.completed]

    @property
    def stats(self) -> TaskStats:
        return task_stats(self.tasks)
