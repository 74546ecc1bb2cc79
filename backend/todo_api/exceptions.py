"""
Todo API - Exception Hierarchy
==============================

Services and auth dependencies raise these; the handlers registered in
main.py turn each one into the JSON error envelope with its status code.

    TodoAppError (base)          → 500
    ├── UnauthorizedError        → 401 no identity, or the token failed verification
    ├── ForbiddenError           → 403 authenticated, but not the owner
    ├── NotFoundError            → 404 no such list/task, or user never synced
    ├── RateLimitExceededError   → 429
    └── DatabaseError            → 500 (generic message to the client)

`message` is safe to return to the caller. `context` is for the server log;
only the rate-limit handler echoes it back.
"""

from typing import Any, Dict, Optional


def _resource_context(
    resource: str,
    resource_id: Optional[str],
    context: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    ctx = dict(context or {})
    ctx["resource"] = resource
    if resource_id:
        ctx["resource_id"] = resource_id
    return ctx


class TodoAppError(Exception):

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class UnauthorizedError(TodoAppError):
    """Missing Authorization header, or a malformed, expired or forged token."""

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(TodoAppError):
    """The list (or the task's list) belongs to another user."""

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=f"You do not have access to this {resource}",
            context=_resource_context(resource, resource_id, context),
        )


class NotFoundError(TodoAppError):
    """
    No row for the id, or (resource "user") a caller who never called
    POST /api/sync-user.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        else:
            message = f"The requested {resource} was not found"
        super().__init__(
            message=message,
            context=_resource_context(resource, resource_id, context),
        )


class DatabaseError(TodoAppError):
    """A query or flush failed; the SQL error goes to `context` and the log."""

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(TodoAppError):

    def __init__(self, retry_after: int = 60, context: Optional[Dict[str, Any]] = None):
        self.retry_after = retry_after
        super().__init__(
            message=f"Too many requests. Retry in {retry_after} seconds.",
            context={**(context or {}), "retry_after": retry_after},
        )
