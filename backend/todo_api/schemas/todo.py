"""
Todo API - List/Task Request & Response Schemas
===============================================

What:  Pydantic models defining the JSON contract for lists, tasks and users.
How:   FastAPI validates request bodies against the *Create/*Update models
       and serializes ORM objects through the *Response models
       (`from_attributes`).

Trimming:
    Titles and task content are stripped before length checks, so "  " is
    rejected as empty rather than stored as whitespace.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, StrictBool, field_validator

TITLE_MAX_LENGTH = 200
CONTENT_MAX_LENGTH = 500


def _clean_text(value: str, field_name: str, max_length: int) -> str:
    stripped = value.strip()
    if not stripped:
        raise ValueError(f"{field_name} must not be empty")
    if len(stripped) > max_length:
        raise ValueError(f"{field_name} must be at most {max_length} characters")
    return stripped


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ListCreate(BaseModel):
    """Body of POST /api/lists."""

    title: str = Field(description="List title", examples=["Groceries"])

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _clean_text(v, "title", TITLE_MAX_LENGTH)


class ListUpdate(BaseModel):
    """Body of PUT /api/lists/{list_id}. Only the title can change."""

    title: str = Field(description="New list title", examples=["Weekend groceries"])

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _clean_text(v, "title", TITLE_MAX_LENGTH)


class TaskCreate(BaseModel):
    """Body of POST /api/lists/{list_id}/tasks. New tasks start incomplete."""

    content: str = Field(description="Task text", examples=["milk"])

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _clean_text(v, "content", CONTENT_MAX_LENGTH)


class TaskUpdate(BaseModel):
    """
    Body of PUT /api/tasks/{task_id}.

    Partial update: a field that is omitted (or sent as null) keeps its
    stored value. `{}` is accepted and returns the task unchanged.
    """

    completed: Optional[StrictBool] = Field(default=None, description="New completion flag")
    content: Optional[str] = Field(default=None, description="New task text")

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _clean_text(v, "content", CONTENT_MAX_LENGTH)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class TaskResponse(BaseModel):
    id: uuid.UUID
    content: str
    completed: bool
    list_id: uuid.UUID
    created_at: datetime

    model_config = {"from_attributes": True}


class ListResponse(BaseModel):
    """
    A list with its tasks in insertion order.

    Returned by every list endpoint, including create (with `tasks: []`)
    and rename.
    """

    id: uuid.UUID
    title: str
    user_id: uuid.UUID
    created_at: datetime
    tasks: List[TaskResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    """Returned by POST /api/sync-user."""

    id: uuid.UUID
    external_auth_id: str
    created_at: datetime

    model_config = {"from_attributes": True}
