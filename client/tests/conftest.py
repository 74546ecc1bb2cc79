"""
Todo Client - Test Configuration (conftest.py)
==============================================

Fixture Hierarchy:
    Function-scoped:
    ├── backend:  FakeBackend, an in-memory stand-in for the Todo API
    ├── api:      TodoApiClient wired to the fake through httpx.MockTransport
    ├── session:  TodoSession over `api` with a fresh store
    └── make_list / make_task: record builders for reducer and view tests
"""

import asyncio
import itertools
import json
import uuid
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio

from todo_client.api import TodoApiClient
from todo_client.models import Task, TodoList
from todo_client.session import TodoSession

BASE_URL = "http://todo.test"
TOKEN = "test-session-token"


class FakeBackend:
    """
    Serves /api/* from dicts, the way the real backend shapes its JSON.

    `fail_next(status, message)` makes the next request fail with the
    standard error envelope; `latency` makes every response await first.
    """

    def __init__(self):
        self.lists: Dict[str, Dict[str, Any]] = {}
        self.requests: List[httpx.Request] = []
        self.latency: float = 0.0
        self._failures: List[Tuple[int, str]] = []
        self._clock = itertools.count(1)

    def fail_next(self, status: int, message: str) -> None:
        self._failures.append((status, message))

    def seed_list(self, title: str, tasks: Tuple[Tuple[str, bool], ...] = ()) -> Dict[str, Any]:
        todo_list = self._new_list(title)
        for content, completed in tasks:
            task = self._new_task(todo_list["id"], content)
            task["completed"] = completed
        return todo_list

    # ── Records ───────────────────────────────────────────────────────────

    def _timestamp(self) -> str:
        return f"2025-01-10T12:00:{next(self._clock):02d}+00:00"

    def _new_list(self, title: str) -> Dict[str, Any]:
        todo_list = {
            "id": str(uuid.uuid4()),
            "title": title,
            "user_id": "user-1",
            "created_at": self._timestamp(),
            "tasks": [],
        }
        self.lists[todo_list["id"]] = todo_list
        return todo_list

    def _new_task(self, list_id: str, content: str) -> Dict[str, Any]:
        task = {
            "id": str(uuid.uuid4()),
            "content": content,
            "completed": False,
            "list_id": list_id,
            "created_at": self._timestamp(),
        }
        self.lists[list_id]["tasks"].append(task)
        return task

    def _find_task(self, task_id: str) -> Optional[Dict[str, Any]]:
        for todo_list in self.lists.values():
            for task in todo_list["tasks"]:
                if task["id"] == task_id:
                    return task
        return None

    # ── Transport ─────────────────────────────────────────────────────────

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.latency:
            await asyncio.sleep(self.latency)

        if request.headers.get("Authorization") != f"Bearer {TOKEN}":
            return _error(401, "Invalid session token")
        if self._failures:
            return _error(*self._failures.pop(0))

        payload = json.loads(request.content) if request.content else {}
        parts = request.url.path.strip("/").split("/")[1:]  # drop "api"
        method = request.method

        if parts == ["sync-user"] and method == "POST":
            return httpx.Response(200, json={"id": "user-1", "external_auth_id": "user_test"})

        if parts == ["lists"] and method == "GET":
            return httpx.Response(200, json=list(self.lists.values()))
        if parts == ["lists"] and method == "POST":
            return httpx.Response(200, json=self._new_list(payload["title"]))

        if len(parts) >= 2 and parts[0] == "lists":
            todo_list = self.lists.get(parts[1])
            if todo_list is None:
                return _error(404, "list was not found")
            if len(parts) == 3 and parts[2] == "tasks" and method == "POST":
                return httpx.Response(200, json=self._new_task(todo_list["id"], payload["content"]))
            if method == "PUT":
                todo_list["title"] = payload["title"]
                return httpx.Response(200, json=todo_list)
            if method == "DELETE":
                del self.lists[todo_list["id"]]
                return httpx.Response(204)

        if len(parts) == 2 and parts[0] == "tasks":
            task = self._find_task(parts[1])
            if task is None:
                return _error(404, "task was not found")
            if method == "PUT":
                for field in ("completed", "content"):
                    if field in payload:
                        task[field] = payload[field]
                return httpx.Response(200, json=task)
            if method == "DELETE":
                self.lists[task["list_id"]]["tasks"].remove(task)
                return httpx.Response(204)

        return _error(404, "Not Found")


def _error(status: int, message: str) -> httpx.Response:
    return httpx.Response(
        status,
        json={"error": "error", "message": message, "request_id": "test"},
    )


@pytest.fixture
def backend():
    return FakeBackend()


@pytest_asyncio.fixture
async def api(backend):
    client = TodoApiClient(
        BASE_URL,
        lambda: TOKEN,
        transport=httpx.MockTransport(backend.handler),
    )
    yield client
    await client.aclose()


@pytest.fixture
def session(api):
    return TodoSession(api)


@pytest.fixture
def make_task():
    def _make(content: str, completed: bool = False, list_id: str = "l1", id: str = None) -> Task:
        return Task(id=id or content, content=content, completed=completed, list_id=list_id)
    return _make


@pytest.fixture
def make_list(make_task):
    def _make(title: str, *tasks, id: str = None) -> TodoList:
        """Tasks are given as "content" or ("content", completed)."""
        list_id = id or title
        built = []
        for item in tasks:
            content, completed = (item, False) if isinstance(item, str) else item
            built.append(make_task(content, completed, list_id=list_id, id=f"{list_id}:{content}"))
        return TodoList(id=list_id, title=title, tasks=tuple(built))
    return _make
