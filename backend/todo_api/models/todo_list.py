"""
Todo API - TodoList SQLAlchemy Model
====================================

What:  A named collection of tasks owned by exactly one user.
How:   `tasks` is loaded eagerly (selectin) in insertion order, so a list
       can be serialized straight after a query without lazy loading, which
       async sessions do not allow.

Ordering:
    "Insertion order" means created_at order. Rows created within the same
    clock tick tie on created_at; the id tie-break keeps their order stable
    between reads, but it is not necessarily the order they were inserted.

Query Patterns:
    - Caller's lists: SELECT ... WHERE user_id = :uid ORDER BY created_at, id
      → idx_todo_lists_user_id
    - Ownership check: SELECT ... WHERE id = :list_id, compare user_id
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlalchemy import DateTime, ForeignKey, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from todo_api.database import Base

if TYPE_CHECKING:
    from todo_api.models.task import Task
    from todo_api.models.user import User


class TodoList(Base):
    """A user's to-do list."""

    __tablename__ = "todo_lists"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owner of the list and, transitively, of its tasks",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    user: Mapped["User"] = relationship(back_populates="lists")

    tasks: Mapped[List["Task"]] = relationship(
        back_populates="todo_list",
        order_by="[Task.created_at, Task.id]",
        lazy="selectin",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_todo_lists_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<TodoList(id={self.id}, title='{self.title}', user_id={self.user_id})>"
