"""
Todo API - Application Package
==============================

What: The REST backend for personal to-do lists (lists, tasks, user sync).
Who:  Imported by uvicorn (`todo_api.main:app`), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth dependencies
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← ownership checks, CRUD
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch the ORM directly; every list or task lookup goes
    through a service that knows which user is asking.
"""

__version__ = "1.0.0"
