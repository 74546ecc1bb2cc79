"""Create users, todo_lists and tasks tables

Revision ID: 001
Revises: None
Create Date: 2025-01-10 00:00:00.000000+00:00

Column types are the generic SQLAlchemy ones (sa.Uuid, TIMESTAMP WITH TIME
ZONE) so the same revision applies to PostgreSQL and SQLite.

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "external_auth_id",
            sa.String(255),
            nullable=False,
            comment="User id issued by the identity provider (JWT sub claim)",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    # Every authenticated request looks the caller up by this column
    op.create_index(
        "ix_users_external_auth_id",
        "users",
        ["external_auth_id"],
        unique=True,
    )

    op.create_table(
        "todo_lists",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column(
            "user_id",
            sa.Uuid(),
            nullable=False,
            comment="Owner of the list and, transitively, of its tasks",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_todo_lists_user_id", "todo_lists", ["user_id"])

    op.create_table(
        "tasks",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("content", sa.String(500), nullable=False),
        sa.Column(
            "completed",
            sa.Boolean(),
            server_default=sa.text("false"),
            nullable=False,
        ),
        sa.Column("list_id", sa.Uuid(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["list_id"], ["todo_lists.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    # Tasks are always read per list in creation order
    op.create_index(
        "idx_tasks_list_id_created_at",
        "tasks",
        ["list_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("idx_tasks_list_id_created_at", table_name="tasks")
    op.drop_table("tasks")
    op.drop_index("idx_todo_lists_user_id", table_name="todo_lists")
    op.drop_table("todo_lists")
    op.drop_index("ix_users_external_auth_id", table_name="users")
    op.drop_table("users")
