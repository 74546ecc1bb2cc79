"""
Todo Client - HTTP API Client
=============================

What:  Async wrapper over the Todo API's /api/* endpoints.
How:   One httpx.AsyncClient per TodoApiClient; every request asks the token
       provider for a fresh bearer token. Any non-2xx response, and any
       transport failure, is raised as ApiError. There are no retries.

Usage:
    async with TodoApiClient("http://localhost:4000", lambda: token) as api:
        await api.sync_user()
        lists = await api.get_lists()
"""

import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

from todo_client.models import Task, TodoList

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


class ApiError(Exception):
    """
    A failed API call.

    Attributes:
        status:   HTTP status, or 0 when no response was received
        message:  The server's error message when it sent one
    """

    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"ApiError(status={self.status}, message={self.message!r})"


class TodoApiClient:

    def __init__(
        self,
        base_url: str,
        token_provider: TokenProvider,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._token_provider = token_provider
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "TodoApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── Endpoints ─────────────────────────────────────────────────────────

    async def sync_user(self) -> Dict[str, Any]:
        return await self._request("POST", "/api/sync-user")

    async def get_lists(self) -> List[TodoList]:
        data = await self._request("GET", "/api/lists")
        return [TodoList.from_json(item) for item in data]

    async def create_list(self, title: str) -> TodoList:
        data = await self._request("POST", "/api/lists", json={"title": title})
        return TodoList.from_json(data)

    async def rename_list(self, list_id: str, title: str) -> TodoList:
        data = await self._request("PUT", f"/api/lists/{list_id}", json={"title": title})
        return TodoList.from_json(data)

    async def delete_list(self, list_id: str) -> None:
        await self._request("DELETE", f"/api/lists/{list_id}")

    async def add_task(self, list_id: str, content: str) -> Task:
        data = await self._request(
            "POST", f"/api/lists/{list_id}/tasks", json={"content": content}
        )
        return Task.from_json(data)

    async def update_task(
        self,
        task_id: str,
        completed: Optional[bool] = None,
        content: Optional[str] = None,
    ) -> Task:
        """Send only the fields that are not None."""
        body: Dict[str, Any] = {}
        if completed is not None:
            body["completed"] = completed
        if content is not None:
            body["content"] = content
        data = await self._request("PUT", f"/api/tasks/{task_id}", json=body)
        return Task.from_json(data)

    async def delete_task(self, task_id: str) -> None:
        await self._request("DELETE", f"/api/tasks/{task_id}")

    # ── Transport ─────────────────────────────────────────────────────────

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        token = self._token_provider()
        if not token:
            raise ApiError(401, "Missing auth token")

        try:
            response = await self._http.request(
                method,
                path,
                json=json,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, str(e))
            raise ApiError(0, f"Could not reach the server: {e}") from e

        if response.is_error:
            message = _error_message(response)
            logger.warning("%s %s → %d %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text.strip() or response.reason_phrase or f"HTTP {response.status_code}"
