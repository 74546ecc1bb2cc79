"""
Todo API - User Service
=======================

What:  Maps verified identities onto local User rows.
How:   `sync_user` upserts by external id (create-or-no-op);
       `get_by_external_id` resolves the caller for every other endpoint and
       raises NotFoundError when the caller never synced.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.exceptions import DatabaseError, NotFoundError
from todo_api.models.user import User
from todo_api.services.identity_base import CallerIdentity

logger = logging.getLogger(__name__)


class UserService:
    """Business logic for local user records."""

    async def sync_user(self, db: AsyncSession, identity: CallerIdentity) -> User:
        """
        Create the User for this identity if it does not exist yet.

        Two first-time syncs racing each other both try to INSERT; the loser
        hits the unique constraint inside its savepoint, rolls back just that
        savepoint and reads the winner's row.

        Returns:
            The existing or newly created User.

        Raises:
            DatabaseError: The lookup or insert failed.
        """
        try:
            user = await self._find(db, identity.external_id)
            if user is not None:
                return user

            user = User(external_auth_id=identity.external_id)
            try:
                async with db.begin_nested():
                    db.add(user)
            except IntegrityError:
                logger.info("Concurrent sync for %s; using existing row", identity.external_id)
                existing = await self._find(db, identity.external_id)
                if existing is None:
                    raise
                return existing

            logger.info("Created user %s for identity %s", user.id, identity.external_id)
            return user

        except SQLAlchemyError as e:
            logger.error("Database error syncing user %s: %s", identity.external_id, str(e))
            raise DatabaseError(
                message="Could not sync your account. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def get_by_external_id(self, db: AsyncSession, external_id: str) -> User:
        """
        Resolve the caller's local User.

        Raises:
            NotFoundError: No User row for this identity (→ 404)
            DatabaseError: Query execution failed (→ 500)
        """
        try:
            user = await self._find(db, external_id)
        except SQLAlchemyError as e:
            logger.error("Database error loading user %s: %s", external_id, str(e))
            raise DatabaseError(
                message="Could not load your account. Please try again.",
                context={"error_type": type(e).__name__},
            )
        if user is None:
            raise NotFoundError(resource="user")
        return user

    @staticmethod
    async def _find(db: AsyncSession, external_id: str):
        result = await db.execute(
            select(User).where(User.external_auth_id == external_id)
        )
        return result.scalar_one_or_none()


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
