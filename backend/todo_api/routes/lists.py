"""
Todo API - List Route Handlers
==============================

What:  CRUD for the caller's lists, plus task creation under a list.

Route Inventory:
    POST   /api/lists                  create a list (tasks: [])
    GET    /api/lists                  the caller's lists with tasks
    PUT    /api/lists/{list_id}        rename (403 not owner, 404 absent)
    DELETE /api/lists/{list_id}        delete list and tasks (403, 404)
    POST   /api/lists/{list_id}/tasks  add a task (404 if absent or not owned)
"""

import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.database import get_db_session
from todo_api.dependencies import get_current_user
from todo_api.models.user import User
from todo_api.schemas.common import ErrorResponse
from todo_api.schemas.todo import (
    ListCreate,
    ListResponse,
    ListUpdate,
    TaskCreate,
    TaskResponse,
)
from todo_api.services.list_service import list_service
from todo_api.services.task_service import task_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Lists"])

_AUTH_ERRORS = {
    401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
    404: {"description": "User not synced, or list not found", "model": ErrorResponse},
}


@router.post(
    "/lists",
    response_model=ListResponse,
    responses=_AUTH_ERRORS,
    summary="Create a list",
)
async def create_list(
    payload: ListCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ListResponse:
    todo_list = await list_service.create_list(db, user, payload.title)
    return ListResponse.model_validate(todo_list)


@router.get(
    "/lists",
    response_model=List[ListResponse],
    responses=_AUTH_ERRORS,
    summary="List the caller's lists with their tasks",
)
async def get_lists(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[ListResponse]:
    lists = await list_service.get_lists(db, user)
    return [ListResponse.model_validate(todo_list) for todo_list in lists]


@router.put(
    "/lists/{list_id}",
    response_model=ListResponse,
    responses={
        **_AUTH_ERRORS,
        403: {"description": "List belongs to another user", "model": ErrorResponse},
    },
    summary="Rename a list",
)
async def rename_list(
    list_id: uuid.UUID,
    payload: ListUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ListResponse:
    todo_list = await list_service.rename_list(db, user, list_id, payload.title)
    return ListResponse.model_validate(todo_list)


@router.delete(
    "/lists/{list_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        **_AUTH_ERRORS,
        403: {"description": "List belongs to another user", "model": ErrorResponse},
    },
    summary="Delete a list and all of its tasks",
)
async def delete_list(
    list_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await list_service.delete_list(db, user, list_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/lists/{list_id}/tasks",
    response_model=TaskResponse,
    responses=_AUTH_ERRORS,
    summary="Add a task to a list",
)
async def create_task(
    list_id: uuid.UUID,
    payload: TaskCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TaskResponse:
    task = await task_service.create_task(db, user, list_id, payload.content)
    return TaskResponse.model_validate(task)
