"""
Client configuration, read from TODO_* environment variables or a .env file.

    TODO_API_BASE_URL       backend origin (default http://localhost:4000)
    TODO_AUTH_TOKEN         identity provider session token sent as Bearer
    TODO_REQUEST_TIMEOUT    seconds per HTTP request
    TODO_LOG_LEVEL          client log level (default WARNING)
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):

    api_base_url: str = Field(default="http://localhost:4000")
    auth_token: str = Field(default="")
    request_timeout: float = Field(default=10.0, gt=0, le=120)
    log_level: str = Field(default="WARNING")

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    model_config = {
        "env_prefix": "TODO_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }
