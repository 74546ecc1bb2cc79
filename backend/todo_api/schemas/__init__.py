"""Todo API - Pydantic request/response schemas."""
