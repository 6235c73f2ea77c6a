"""Client side: HTTP transport, session persistence and the synchronized task mirror."""

from .api import TrackerApi
from .session import FileSessionStore, MemorySessionStore, Session, SessionStore
from .state import ClientSyncState, TaskStats, filter_tasks, task_stats

__all__ = [
    "ClientSyncState",
    "FileSessionStore",
    "MemorySessionStore",
    "Session",
    "SessionStore",
    "TaskStats",
    "TrackerApi",
    "filter_tasks",
    "task_stats",
]
