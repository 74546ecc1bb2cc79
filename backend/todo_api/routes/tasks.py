"""
Todo API - Task Route Handlers
==============================

What:  PUT /api/tasks/{task_id} (partial update) and DELETE /api/tasks/{task_id}.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.database import get_db_session
from todo_api.dependencies import get_current_user
from todo_api.models.user import User
from todo_api.schemas.common import ErrorResponse
from todo_api.schemas.todo import TaskResponse, TaskUpdate
from todo_api.services.task_service import task_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Tasks"])

_ERRORS = {
    401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
    403: {"description": "Task's list belongs to another user", "model": ErrorResponse},
    404: {"description": "User not synced, or task not found", "model": ErrorResponse},
}


@router.put(
    "/tasks/{task_id}",
    response_model=TaskResponse,
    responses=_ERRORS,
    summary="Update a task's completion flag and/or content",
)
async def update_task(
    task_id: uuid.UUID,
    payload: TaskUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TaskResponse:
    """
    Only the fields present in the body change:

        {"completed": true}     → content untouched
        {"content": "oat milk"} → completed untouched
    """
    task = await task_service.update_task(
        db,
        user,
        task_id,
        completed=payload.completed,
        content=payload.content,
    )
    return TaskResponse.model_validate(task)


@router.delete(
    "/tasks/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=_ERRORS,
    summary="Delete a task",
)
async def delete_task(
    task_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await task_service.delete_task(db, user, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
