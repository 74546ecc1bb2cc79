"""
Todo Client - State Container
=============================

What:  The client's mirror of the caller's lists, changed only by actions.
How:   `reduce(state, action)` is pure and returns a new TodoState;
       TodoStore applies actions one at a time under a lock and notifies
       subscribers after each update.

Mirror rules:
    ListsLoaded   replace everything, mark loaded
    ListCreated   prepend
    ListRenamed   replace the matching list (server copy, tasks included)
    ListDeleted   remove the list
    TaskAdded     append to its list
    TaskUpdated   replace the matching task
    TaskDeleted   remove the task
    ErrorRaised   set the error message; lists unchanged
    SignedOut     back to the initial state
"""

import logging
import threading
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple, Union

from todo_client.models import Task, TodoList

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TodoState:
    lists: Tuple[TodoList, ...] = ()
    error: Optional[str] = None
    loaded: bool = False

    def find_list(self, list_id: str) -> Optional[TodoList]:
        for todo_list in self.lists:
            if todo_list.id == list_id:
                return todo_list
        return None

    @property
    def has_tasks(self) -> bool:
        return any(todo_list.tasks for todo_list in self.lists)


# ── Actions ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ListsLoaded:
    lists: Sequence[TodoList]


@dataclass(frozen=True)
class ListCreated:
    todo_list: TodoList


@dataclass(frozen=True)
class ListRenamed:
    todo_list: TodoList


@dataclass(frozen=True)
class ListDeleted:
    list_id: str


@dataclass(frozen=True)
class TaskAdded:
    list_id: str
    task: Task


@dataclass(frozen=True)
class TaskUpdated:
    list_id: str
    task: Task


@dataclass(frozen=True)
class TaskDeleted:
    list_id: str
    task_id: str


@dataclass(frozen=True)
class ErrorRaised:
    message: str


@dataclass(frozen=True)
class SignedOut:
    pass


Action = Union[
    ListsLoaded,
    ListCreated,
    ListRenamed,
    ListDeleted,
    TaskAdded,
    TaskUpdated,
    TaskDeleted,
    ErrorRaised,
    SignedOut,
]


# ── Reducers ──────────────────────────────────────────────────────────────

def _map_list(
    state: TodoState, list_id: str, change: Callable[[TodoList], TodoList]
) -> TodoState:
    return replace(
        state,
        lists=tuple(
            change(todo_list) if todo_list.id == list_id else todo_list
            for todo_list in state.lists
        ),
    )


def reduce(state: TodoState, action: Action) -> TodoState:
    """Return the state after `action`. Unknown list/task ids leave lists as they are."""
    if isinstance(action, ListsLoaded):
        return replace(state, lists=tuple(action.lists), loaded=True)

    if isinstance(action, ListCreated):
        return replace(state, lists=(action.todo_list,) + state.lists)

    if isinstance(action, ListRenamed):
        return _map_list(state, action.todo_list.id, lambda _: action.todo_list)

    if isinstance(action, ListDeleted):
        return replace(
            state,
            lists=tuple(l for l in state.lists if l.id != action.list_id),
        )

    if isinstance(action, TaskAdded):
        return _map_list(
            state,
            action.list_id,
            lambda l: l.with_tasks(l.tasks + (action.task,)),
        )

    if isinstance(action, TaskUpdated):
        return _map_list(
            state,
            action.list_id,
            lambda l: l.with_tasks(
                action.task if t.id == action.task.id else t for t in l.tasks
            ),
        )

    if isinstance(action, TaskDeleted):
        return _map_list(
            state,
            action.list_id,
            lambda l: l.with_tasks(t for t in l.tasks if t.id != action.task_id),
        )

    if isinstance(action, ErrorRaised):
        return replace(state, error=action.message)

    if isinstance(action, SignedOut):
        return TodoState()

    raise TypeError(f"Unknown action: {action!r}")


# ── Store ─────────────────────────────────────────────────────────────────

Listener = Callable[[TodoState, Action], None]


class TodoStore:
    """
    Single writer for TodoState.

    Listeners run after the new state is published, outside the lock, so a
    listener may read `store.state` (or dispatch again) safely.
    """

    def __init__(self, initial: Optional[TodoState] = None):
        self._state = initial or TodoState()
        self._lock = threading.Lock()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> TodoState:
        return self._state

    def dispatch(self, action: Action) -> TodoState:
        with self._lock:
            self._state = reduce(self._state, action)
            state = self._state
        logger.debug("Dispatched %s", type(action).__name__)
        for listener in list(self._listeners):
            listener(state, action)
        return state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener`; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
