"""
Dependency wiring for the FastAPI app.

    get_caller_identity  Authorization header → verified CallerIdentity (401)
    get_current_user     CallerIdentity → synced User row (404 if never synced)

`get_identity_provider` is the seam tests override
(`app.dependency_overrides`) to swap in a different verifier.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.database import get_db_session
from todo_api.exceptions import UnauthorizedError
from todo_api.models.user import User
from todo_api.services.identity_base import CallerIdentity, IdentityProvider
from todo_api.services.identity_service import identity_service
from todo_api.services.user_service import user_service

logger = logging.getLogger(__name__)

# auto_error=False: a missing header reaches our handler and gets the
# standard error envelope instead of FastAPI's default 403
_bearer = HTTPBearer(auto_error=False, description="Identity provider session token")


def get_identity_provider() -> IdentityProvider:
    return identity_service


async def get_caller_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> CallerIdentity:
    """Verify the bearer token on the request."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError(message="Missing bearer token")

    identity = provider.verify_token(credentials.credentials)
    request.state.auth_subject = identity.external_id
    return identity


async def get_current_user(
    identity: CallerIdentity = Depends(get_caller_identity),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """The caller's local User. Every endpoint except sync-user depends on this."""
    return await user_service.get_by_external_id(db, identity.external_id)
