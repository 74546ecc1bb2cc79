"""
Client-side records for lists and tasks.

Both are frozen: reducers build new instances with dataclasses.replace()
instead of mutating what subscribers may still be holding.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class Task:
    id: str
    content: str
    completed: bool
    list_id: str
    created_at: str = ""

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Task":
        return cls(
            id=str(data["id"]),
            content=data["content"],
            completed=bool(data["completed"]),
            list_id=str(data["list_id"]),
            created_at=data.get("created_at", ""),
        )


@dataclass(frozen=True)
class TodoList:
    id: str
    title: str
    user_id: str = ""
    created_at: str = ""
    tasks: Tuple[Task, ...] = field(default_factory=tuple)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "TodoList":
        return cls(
            id=str(data["id"]),
            title=data["title"],
            user_id=str(data.get("user_id", "")),
            created_at=data.get("created_at", ""),
            tasks=tuple(Task.from_json(t) for t in data.get("tasks", ())),
        )

    @property
    def completed_count(self) -> int:
        return sum(1 for task in self.tasks if task.completed)

    def find_task(self, task_id: str):
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def with_tasks(self, tasks) -> "TodoList":
        return replace(self, tasks=tuple(tasks))
