"""
Todo API - Task Service
=======================

What:  Create, partially update and delete tasks.
How:   A task's owner is its list's owner, so every lookup joins the task to
       its list's user_id and compares that with the caller.

Task creation scopes the list lookup to the caller (id AND user_id): a list
that belongs to someone else is reported exactly like a missing one, and no
task row is written.
"""

import logging
import uuid
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.exceptions import DatabaseError, ForbiddenError, NotFoundError, TodoAppError
from todo_api.models.task import Task
from todo_api.models.todo_list import TodoList
from todo_api.models.user import User

logger = logging.getLogger(__name__)


class TaskService:
    """Business logic for tasks."""

    async def create_task(
        self, db: AsyncSession, user: User, list_id: uuid.UUID, content: str
    ) -> Task:
        """
        Append a new, incomplete task to one of the user's lists.

        Raises:
            NotFoundError: The list does not exist or is not the caller's (→ 404)
            DatabaseError: Insert failed (→ 500)
        """
        try:
            result = await db.execute(
                select(TodoList.id).where(
                    TodoList.id == list_id,
                    TodoList.user_id == user.id,
                )
            )
            if result.scalar_one_or_none() is None:
                raise NotFoundError(resource="list", resource_id=str(list_id))

            task = Task(content=content, completed=False, list_id=list_id)
            db.add(task)
            await db.flush()
        except TodoAppError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error creating task in list %s: %s", list_id, str(e))
            raise DatabaseError(
                message="Could not create the task. Please try again.",
                context={"list_id": str(list_id)},
            )
        logger.info("User %s added task %s to list %s", user.id, task.id, list_id)
        return task

    async def update_task(
        self,
        db: AsyncSession,
        user: User,
        task_id: uuid.UUID,
        completed: Optional[bool] = None,
        content: Optional[str] = None,
    ) -> Task:
        """
        Partially update a task; None means "leave unchanged".

        Raises:
            NotFoundError: No task with this id (→ 404)
            ForbiddenError: The task's list belongs to another user (→ 403)
        """
        task = await self._get_owned_task(db, user, task_id)
        try:
            if completed is not None:
                task.completed = completed
            if content is not None:
                task.content = content
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating task %s: %s", task_id, str(e))
            raise DatabaseError(
                message="Could not update the task. Please try again.",
                context={"task_id": str(task_id)},
            )
        return task

    async def delete_task(self, db: AsyncSession, user: User, task_id: uuid.UUID) -> None:
        task = await self._get_owned_task(db, user, task_id)
        try:
            await db.delete(task)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting task %s: %s", task_id, str(e))
            raise DatabaseError(
                message="Could not delete the task. Please try again.",
                context={"task_id": str(task_id)},
            )
        logger.info("User %s deleted task %s", user.id, task_id)

    async def _get_owned_task(
        self, db: AsyncSession, user: User, task_id: uuid.UUID
    ) -> Task:
        task, owner_id = await self._find_with_owner(db, task_id)
        if task is None:
            raise NotFoundError(resource="task", resource_id=str(task_id))
        if owner_id != user.id:
            logger.warning("User %s denied access to task %s", user.id, task_id)
            raise ForbiddenError(resource="task", resource_id=str(task_id))
        return task

    @staticmethod
    async def _find_with_owner(
        db: AsyncSession, task_id: uuid.UUID
    ) -> Tuple[Optional[Task], Optional[uuid.UUID]]:
        try:
            result = await db.execute(
                select(Task, TodoList.user_id)
                .join(TodoList, Task.list_id == TodoList.id)
                .where(Task.id == task_id)
            )
            row = result.one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching task %s: %s", task_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the task. Please try again.",
                context={"task_id": str(task_id)},
            )
        if row is None:
            return None, None
        return row[0], row[1]


# ── Singleton Instance ────────────────────────────────────────────────────
task_service = TaskService()
