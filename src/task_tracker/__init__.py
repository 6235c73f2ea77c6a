"""
Task Tracker package.

Server side: a FastAPI app (task_tracker.main:app) exposing per-user tasks and
profiles. Client side: task_tracker.client keeps a local mirror of that state.
"""

__version__ = "0.1.0"
