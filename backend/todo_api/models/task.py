"""
Todo API - Task SQLAlchemy Model
================================

What:  A content string with a completion flag, belonging to exactly one list.
       A task has no owner column: its owner is its list's owner.
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from todo_api.database import Base

if TYPE_CHECKING:
    from todo_api.models.todo_list import TodoList


class Task(Base):
    """A single to-do item."""

    __tablename__ = "tasks"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    content: Mapped[str] = mapped_column(String(500), nullable=False)

    completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    list_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("todo_lists.id", ondelete="CASCADE"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    todo_list: Mapped["TodoList"] = relationship(back_populates="tasks")

    __table_args__ = (
        Index("idx_tasks_list_id_created_at", "list_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, completed={self.completed}, list_id={self.list_id})>"
