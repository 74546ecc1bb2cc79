"""
Todo API - ORM Models
=====================

Importing this package registers every model with `Base.metadata`
(Alembic's env.py and the test suite rely on that).
"""

from todo_api.models.task import Task
from todo_api.models.todo_list import TodoList
from todo_api.models.user import User

__all__ = ["Task", "TodoList", "User"]
