"""
Typed failures shared by the server and the client.

Services and stores raise these; only the API layer turns them into HTTP
responses, and the client turns error responses back into them.
"""
from __future__ import annotations

from typing import Any, Dict, Optional, Type


class TrackerError(Exception):
    """Base class for every expected failure in the tracker."""

    status_code: int = 500
    default_message: str = "Request failed"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind, "message": self.message}


class Unauthenticated(TrackerError):
    status_code = 401
    default_message = "Not authenticated"


class InvalidInput(TrackerError):
    status_code = 422
    default_message = "Invalid input"


class Forbidden(TrackerError):
    status_code = 403
    default_message = "Not allowed to access this task"


class NotFound(TrackerError):
    status_code = 404
    default_message = "Task not found"


class Conflict(TrackerError):
    status_code = 409
    default_message = "Resource already exists"


class ServerError(TrackerError):
    """Storage or other internal failure. The message is never shown to callers."""

    status_code = 500
    default_message = "Internal server error"


_BY_KIND: Dict[str, Type[TrackerError]] = {
    cls.__name__: cls
    for cls in (Unauthenticated, InvalidInput, Forbidden, NotFound, Conflict, ServerError)
}
# Schema validation failures come back from the API as "ValidationError".
_BY_KIND["ValidationError"] = InvalidInput

_BY_STATUS: Dict[int, Type[TrackerError]] = {
    cls.status_code: cls for cls in _BY_KIND.values()
}


# PUBLIC_INTERFACE
def error_from_payload(status_code: int, payload: Any) -> TrackerError:
    """
    Rebuild a typed error from an API error response.

    The "error" field decides the type; the status code is used when the body is
    not one of ours (e.g. a proxy error page). Any other 4xx is the caller's
    fault and comes back as InvalidInput; everything else is a ServerError.
    """
    kind = payload.get("error") if isinstance(payload, dict) else None
    message = payload.get("message") if isinstance(payload, dict) else None
    cls = _BY_KIND.get(kind or "") or _BY_STATUS.get(status_code)
    if cls is None:
        cls = InvalidInput if 400 <= status_code < 500 else ServerError
    return cls(message)
