"""Configuration management for testbox.

Settings are read from the process environment (and an optional ``.env``
file). The Docker variables keep their conventional names (``DOCKER_HOST``,
``DOCKER_TLS_VERIFY``, ``DOCKER_CERT_PATH``); everything testbox-specific is
prefixed with ``TESTBOX_``.

Usage:
    from testbox.config import settings

    # Access grouped settings
    settings.docker.disk_check_image
    settings.logging.log_level

    # Or flat access
    settings.disk_check_image
    settings.log_level
"""

from pydantic_settings import SettingsConfigDict

from .docker import DockerConfig
from .logging import LoggingConfig


class Settings(DockerConfig, LoggingConfig):
    """Application settings with environment variable support.

    Fields and validators are declared once on the group classes; this class
    adds ``.env`` loading and the grouped views.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ========================================================================
    # GROUPED CONFIG ACCESS
    # ========================================================================

    @property
    def docker(self) -> DockerConfig:
        """Access Docker endpoint, precondition and startup configuration group."""
        return DockerConfig.model_validate(
            self.model_dump(include=set(DockerConfig.model_fields))
        )

    @property
    def logging(self) -> LoggingConfig:
        """Access logging configuration group."""
        return LoggingConfig.model_validate(
            self.model_dump(include=set(LoggingConfig.model_fields))
        )


# Global settings instance
settings = Settings()

__all__ = [
    "Settings",
    "settings",
    "DockerConfig",
    "LoggingConfig",
]
