"""
Todo API - User SQLAlchemy Model
================================

What:  The local record of a person signed in through the identity provider.
How:   Keyed by the provider's user id (`external_auth_id`, the JWT `sub`
       claim). Rows are created lazily by POST /api/sync-user and never
       deleted by the API.
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlalchemy import DateTime, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from todo_api.database import Base

if TYPE_CHECKING:
    from todo_api.models.todo_list import TodoList


class User(Base):
    """A synced identity-provider user; owner of zero or more lists."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    external_auth_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="User id issued by the identity provider (JWT sub claim)",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    lists: Mapped[List["TodoList"]] = relationship(
        back_populates="user",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, external_auth_id='{self.external_auth_id}')>"
