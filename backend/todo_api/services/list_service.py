"""
Todo API - List Service
=======================

What:  Create, read, rename and delete to-do lists on behalf of a user.
How:   Every operation receives the caller's User; anything that touches an
       existing list goes through `get_owned_list`, which distinguishes a
       missing list (NotFoundError) from someone else's list (ForbiddenError).
Who:   Called by the /api/lists route handlers; TaskService reuses
       `get_owned_list` for task creation.

Deletion:
    Tasks are deleted first, then the list, in the request's single
    transaction (see todo_api.database). A failure between the two statements
    rolls both back.
"""

import logging
import uuid
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.exceptions import DatabaseError, ForbiddenError, NotFoundError
from todo_api.models.task import Task
from todo_api.models.todo_list import TodoList
from todo_api.models.user import User

logger = logging.getLogger(__name__)


class ListService:
    """Business logic for to-do lists."""

    async def create_list(self, db: AsyncSession, user: User, title: str) -> TodoList:
        """Create a list owned by `user`. The returned list has no tasks."""
        try:
            todo_list = TodoList(title=title, user_id=user.id, tasks=[])
            db.add(todo_list)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating list for user %s: %s", user.id, str(e))
            raise DatabaseError(
                message="Could not create the list. Please try again.",
                context={"error_type": type(e).__name__},
            )
        logger.info("User %s created list %s", user.id, todo_list.id)
        return todo_list

    async def get_lists(self, db: AsyncSession, user: User) -> List[TodoList]:
        """All of the user's lists, oldest first (ties by id), each with its tasks."""
        try:
            result = await db.execute(
                select(TodoList)
                .where(TodoList.user_id == user.id)
                .order_by(TodoList.created_at, TodoList.id)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing lists for user %s: %s", user.id, str(e))
            raise DatabaseError(
                message="Could not retrieve your lists. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def get_owned_list(
        self, db: AsyncSession, user: User, list_id: uuid.UUID
    ) -> TodoList:
        """
        Load a list and verify `user` owns it.

        Raises:
            NotFoundError: No list with this id (→ 404)
            ForbiddenError: The list belongs to another user (→ 403)
            DatabaseError: Query execution failed (→ 500)
        """
        try:
            result = await db.execute(select(TodoList).where(TodoList.id == list_id))
            todo_list = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching list %s: %s", list_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the list. Please try again.",
                context={"list_id": str(list_id)},
            )

        if todo_list is None:
            raise NotFoundError(resource="list", resource_id=str(list_id))
        if todo_list.user_id != user.id:
            logger.warning("User %s denied access to list %s", user.id, list_id)
            raise ForbiddenError(resource="list", resource_id=str(list_id))
        return todo_list

    async def rename_list(
        self, db: AsyncSession, user: User, list_id: uuid.UUID, title: str
    ) -> TodoList:
        """Change a list's title. Returns the list with its tasks."""
        todo_list = await self.get_owned_list(db, user, list_id)
        try:
            todo_list.title = title
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error renaming list %s: %s", list_id, str(e))
            raise DatabaseError(
                message="Could not rename the list. Please try again.",
                context={"list_id": str(list_id)},
            )
        return todo_list

    async def delete_list(self, db: AsyncSession, user: User, list_id: uuid.UUID) -> None:
        """Delete a list and all of its tasks."""
        await self.get_owned_list(db, user, list_id)
        try:
            tasks_result = await db.execute(delete(Task).where(Task.list_id == list_id))
            await db.execute(delete(TodoList).where(TodoList.id == list_id))
        except SQLAlchemyError as e:
            logger.error("Database error deleting list %s: %s", list_id, str(e))
            raise DatabaseError(
                message="Could not delete the list. Please try again.",
                context={"list_id": str(list_id)},
            )
        logger.info(
            "User %s deleted list %s (%d tasks)", user.id, list_id, tasks_result.rowcount
        )


# ── Singleton Instance ────────────────────────────────────────────────────
list_service = ListService()
