"""Logging configuration."""

from pydantic import Field, validator
from pydantic_settings import BaseSettings


class LoggingConfig(BaseSettings):
    """structlog output settings."""

    log_level: str = Field(default="INFO", alias="testbox_log_level")
    log_format: str = Field(default="console", alias="testbox_log_format")

    @validator("log_level")
    def normalize_log_level(cls, v):
        return v.upper()

    @validator("log_format")
    def validate_log_format(cls, v):
        v = v.lower()
        if v not in ("console", "json"):
            raise ValueError("log_format must be 'console' or 'json'")
        return v

    class Config:
        env_prefix = ""
        extra = "ignore"
        populate_by_name = True
