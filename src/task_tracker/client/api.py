"""
HTTP transport for the client. Each call takes the Session explicitly and
returns typed models; error responses come back as the shared typed errors.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx

from ..errors import ServerError, error_from_payload
from ..schemas import AuthResponse, ProfileOut, ProfileUpdated, TaskOut
from .session import Session

logger = logging.getLogger(__name__)


class TrackerApi:
    """
    Thin wrapper over an httpx.Client.

    Pass an existing client (for instance FastAPI's TestClient) to talk to an
    in-process app; otherwise one is created for base_url.
    """

    def __init__(
        self,
        http: Optional[httpx.Client] = None,
        base_url: str = "http://localhost:8000",
        timeout: float = 10.0,
    ) -> None:
        self._http = http if http is not None else httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        self._http.close()

    def _request(
        self,
        method: str,
        path: str,
        session: Optional[Session] = None,
        json: Optional[dict] = None,
    ) -> Any:
        headers = {"Authorization": f"Bearer {session.token}"} if session is not None else {}
        try:
            response = self._http.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ServerError("Could not reach the server") from exc

        if response.is_success:
            return response.json()

        try:
            payload = response.json()
        except ValueError:
            payload = None
        raise error_from_payload(response.status_code, payload)

    def register(self, name: str, email: str, password: str) -> Session:
        data = self._request("POST", "/api/users/register", json={"name": name, "email": email, "password": password})
        return Session.from_auth(AuthResponse.model_validate(data))

    def login(self, email: str, password: str) -> Session:
        data = self._request("POST", "/api/users/login", json={"email": email, "password": password})
        return Session.from_auth(AuthResponse.model_validate(data))

    def get_profile(self, session: Session) -> ProfileOut:
        return ProfileOut.model_validate(self._request("GET", "/api/users/profile", session))

    def update_profile(self, session: Session, name: str, email: str) -> ProfileUpdated:
        data = self._request("PUT", "/api/users/profile", session, json={"name": name, "email": email})
        return ProfileUpdated.model_validate(data)

    def list_tasks(self, session: Session) -> List[TaskOut]:
        return [TaskOut.model_validate(t) for t in self._request("GET", "/api/tasks", session)]

    def create_task(self, session: Session, title: str) -> TaskOut:
        return TaskOut.model_validate(self._request("POST", "/api/tasks", session, json={"title": title}))

    def toggle_task(self, session: Session, task_id: str) -> TaskOut:
        return TaskOut.model_validate(self._request("PUT", f"/api/tasks/{task_id}", session))

    def delete_task(self, session: Session, task_id: str) -> None:
        self._request("DELETE", f"/api/tasks/{task_id}", session)
