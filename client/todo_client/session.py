"""
Todo Client - Session Controller
================================

What:  The user actions of a signed-in session.
How:   Each action makes exactly one API call (sign_in makes two). On success
       it dispatches the matching store action and posts a success notice;
       on failure it dispatches ErrorRaised, posts an error notice and leaves
       the lists untouched.

In-flight guard:
    An action keyed by (name, target id) that is already running is ignored
    when submitted again; e.g. two add_task calls for the same list while
    the first is awaiting the server result in a single request.

Drafts:
    rename_list / edit_task take the user's draft text and return the text
    the input should now show: the saved value on success, the current
    value when the draft was blank, unchanged, or the save failed.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Set, Tuple

from todo_client.api import ApiError, TodoApiClient
from todo_client.models import Task, TodoList
from todo_client.store import (
    ErrorRaised,
    ListCreated,
    ListDeleted,
    ListRenamed,
    ListsLoaded,
    SignedOut,
    TaskAdded,
    TaskDeleted,
    TaskUpdated,
    TodoStore,
)

logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"


@dataclass(frozen=True)
class Notice:
    level: str
    message: str


class TodoSession:

    def __init__(
        self,
        api: TodoApiClient,
        store: Optional[TodoStore] = None,
        on_notice: Optional[Callable[[Notice], None]] = None,
    ):
        self.api = api
        self.store = store or TodoStore()
        self.notices: List[Notice] = []
        self.on_notice = on_notice
        self._in_flight: Set[Tuple[str, str]] = set()

    # ── Helpers ───────────────────────────────────────────────────────────

    def is_in_flight(self, action: str, target: str = "") -> bool:
        return (action, target) in self._in_flight

    def _begin(self, action: str, target: str = "") -> bool:
        key = (action, target)
        if key in self._in_flight:
            logger.debug("Ignoring %s for %r: already in flight", action, target)
            return False
        self._in_flight.add(key)
        return True

    def _end(self, action: str, target: str = "") -> None:
        self._in_flight.discard((action, target))

    def _notify(self, level: str, message: str) -> None:
        notice = Notice(level, message)
        self.notices.append(notice)
        if self.on_notice is not None:
            self.on_notice(notice)

    def _fail(self, action: str, error: ApiError) -> None:
        logger.warning("%s failed (%d): %s", action, error.status, error.message)
        self.store.dispatch(ErrorRaised(error.message))
        self._notify(ERROR, error.message)

    def _require_list(self, list_id: str) -> TodoList:
        todo_list = self.store.state.find_list(list_id)
        if todo_list is None:
            raise KeyError(f"Unknown list {list_id}")
        return todo_list

    def _require_task(self, list_id: str, task_id: str) -> Task:
        task = self._require_list(list_id).find_task(task_id)
        if task is None:
            raise KeyError(f"Unknown task {task_id}")
        return task

    # ── Session ───────────────────────────────────────────────────────────

    async def sign_in(self) -> bool:
        """Sync the user, then load their lists. A failure still marks the mirror loaded (empty)."""
        if not self._begin("sign_in"):
            return False
        try:
            await self.api.sync_user()
            lists = await self.api.get_lists()
        except ApiError as e:
            self._fail("sign_in", e)
            self.store.dispatch(ListsLoaded(()))
            return False
        finally:
            self._end("sign_in")
        self.store.dispatch(ListsLoaded(lists))
        return True

    def sign_out(self) -> None:
        self.store.dispatch(SignedOut())
        self.notices.clear()

    # ── Lists ─────────────────────────────────────────────────────────────

    async def create_list(self, title: str) -> Optional[TodoList]:
        title = title.strip()
        if not title or not self._begin("create_list"):
            return None
        try:
            created = await self.api.create_list(title)
        except ApiError as e:
            self._fail("create_list", e)
            return None
        finally:
            self._end("create_list")
        self.store.dispatch(ListCreated(created))
        self._notify(SUCCESS, "List created")
        return created

    async def rename_list(self, list_id: str, draft: str) -> str:
        current = self._require_list(list_id)
        title = draft.strip()
        if not title or title == current.title:
            return current.title
        if not self._begin("rename_list", list_id):
            return current.title
        try:
            updated = await self.api.rename_list(list_id, title)
        except ApiError as e:
            self._fail("rename_list", e)
            return current.title
        finally:
            self._end("rename_list", list_id)
        self.store.dispatch(ListRenamed(updated))
        self._notify(SUCCESS, "List renamed")
        return updated.title

    async def delete_list(self, list_id: str) -> bool:
        self._require_list(list_id)
        if not self._begin("delete_list", list_id):
            return False
        try:
            await self.api.delete_list(list_id)
        except ApiError as e:
            self._fail("delete_list", e)
            return False
        finally:
            self._end("delete_list", list_id)
        self.store.dispatch(ListDeleted(list_id))
        self._notify(SUCCESS, "List deleted")
        return True

    # ── Tasks ─────────────────────────────────────────────────────────────

    async def add_task(self, list_id: str, content: str) -> Optional[Task]:
        content = content.strip()
        if not content or not self._begin("add_task", list_id):
            return None
        try:
            task = await self.api.add_task(list_id, content)
        except ApiError as e:
            self._fail("add_task", e)
            return None
        finally:
            self._end("add_task", list_id)
        self.store.dispatch(TaskAdded(list_id, task))
        self._notify(SUCCESS, "Task added")
        return task

    async def toggle_task(self, list_id: str, task_id: str) -> Optional[Task]:
        task = self._require_task(list_id, task_id)
        if not self._begin("update_task", task_id):
            return None
        try:
            updated = await self.api.update_task(task_id, completed=not task.completed)
        except ApiError as e:
            self._fail("toggle_task", e)
            return None
        finally:
            self._end("update_task", task_id)
        self.store.dispatch(TaskUpdated(list_id, updated))
        self._notify(SUCCESS, "Task updated")
        return updated

    async def edit_task(self, list_id: str, task_id: str, draft: str) -> str:
        task = self._require_task(list_id, task_id)
        content = draft.strip()
        if not content or content == task.content:
            return task.content
        if not self._begin("update_task", task_id):
            return task.content
        try:
            updated = await self.api.update_task(task_id, content=content)
        except ApiError as e:
            self._fail("edit_task", e)
            return task.content
        finally:
            self._end("update_task", task_id)
        self.store.dispatch(TaskUpdated(list_id, updated))
        self._notify(SUCCESS, "Task updated")
        return updated.content

    async def delete_task(self, list_id: str, task_id: str) -> bool:
        self._require_task(list_id, task_id)
        if not self._begin("delete_task", task_id):
            return False
        try:
            await self.api.delete_task(task_id)
        except ApiError as e:
            self._fail("delete_task", e)
            return False
        finally:
            self._end("delete_task", task_id)
        self.store.dispatch(TaskDeleted(list_id, task_id))
        self._notify(SUCCESS, "Task deleted")
        return True
