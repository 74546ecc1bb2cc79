"""
Todo API - User Sync Route
==========================

What:  POST /api/sync-user, called by the client right after sign-in.
How:   Depends only on a verified identity (not on an existing User), then
       upserts the local row.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.database import get_db_session
from todo_api.dependencies import get_caller_identity
from todo_api.schemas.common import ErrorResponse
from todo_api.schemas.todo import UserResponse
from todo_api.services.identity_base import CallerIdentity
from todo_api.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Users"])


@router.post(
    "/sync-user",
    response_model=UserResponse,
    responses={
        200: {"description": "User exists (created now or earlier)", "model": UserResponse},
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
    },
    summary="Create the local user for the signed-in identity",
)
async def sync_user(
    identity: CallerIdentity = Depends(get_caller_identity),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    """Idempotent: calling it again for the same identity changes nothing."""
    user = await user_service.sync_user(db, identity)
    return UserResponse.model_validate(user)
