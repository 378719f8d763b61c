"""Docker endpoint, precondition and startup configuration."""

from typing import Optional, Tuple

from pydantic import Field, validator
from pydantic_settings import BaseSettings


class DockerConfig(BaseSettings):
    """Endpoint discovery, client, precondition and startup settings.

    Aliases are the environment variable names (matched case-insensitively).
    """

    # Explicit endpoint configuration
    docker_host: Optional[str] = Field(default=None, alias="docker_host")
    docker_tls_verify: bool = Field(default=False, alias="docker_tls_verify")
    docker_cert_path: Optional[str] = Field(default=None, alias="docker_cert_path")

    # docker-machine discovery
    docker_machine_binary: str = Field(
        default="docker-machine",
        alias="testbox_docker_machine_binary",
        description="docker-machine executable name or path",
    )
    docker_machine_name: Optional[str] = Field(
        default=None,
        alias="testbox_docker_machine_name",
        description="Machine to use; the first listed machine when unset",
    )

    # Local socket discovery
    docker_socket_path: str = Field(
        default="/var/run/docker.sock", alias="testbox_docker_socket_path"
    )

    # Client construction
    docker_api_version: str = Field(default="auto", alias="testbox_docker_api_version")
    docker_client_timeout: int = Field(
        default=60,
        ge=1,
        le=600,
        alias="testbox_docker_client_timeout",
        description="Timeout in seconds for Docker API calls",
    )
    strategy_probe_timeout: int = Field(
        default=5,
        ge=1,
        le=60,
        alias="testbox_strategy_probe_timeout",
        description="Timeout in seconds for the ping that validates a candidate endpoint",
    )

    # Preconditions
    min_docker_version: str = Field(default="1.6", alias="testbox_min_docker_version")
    disk_check_enabled: bool = Field(default=True, alias="testbox_disk_check_enabled")
    disk_check_image: str = Field(
        default="alpine:3.2",
        alias="testbox_disk_check_image",
        description="Small image used to run `df -P` inside the Docker environment",
    )
    min_free_disk_mb: int = Field(default=2048, ge=0, alias="testbox_min_free_disk_mb")
    image_pull_timeout: float = Field(
        default=300.0,
        gt=0,
        alias="testbox_image_pull_timeout",
        description="Seconds to wait for the disk check image pull to complete",
    )

    # Container startup
    start_attempts: int = Field(default=3, ge=1, le=20, alias="testbox_start_attempts")
    start_retry_interval: float = Field(
        default=0.5, ge=0, le=60, alias="testbox_start_retry_interval"
    )
    startup_timeout: float = Field(
        default=30.0,
        gt=0,
        alias="testbox_startup_timeout",
        description="Seconds to wait for a started container to report running",
    )

    @validator("docker_tls_verify", pre=True)
    def parse_docker_tls_verify(cls, v):
        """Docker treats an empty DOCKER_TLS_VERIFY as disabled."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return False
        return v

    @validator("docker_host", "docker_cert_path", "docker_machine_name", pre=True)
    def blank_as_unset(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @validator("min_docker_version")
    def validate_min_docker_version(cls, v):
        """Ensure the minimum version has numeric major and minor parts."""
        parts = v.split(".")
        if len(parts) < 2 or not all(p.isdigit() for p in parts[:2]):
            raise ValueError("min_docker_version must look like MAJOR.MINOR")
        return v

    @property
    def min_version_tuple(self) -> Tuple[int, int]:
        """Minimum supported Docker version as (major, minor)."""
        major, minor = self.min_docker_version.split(".")[:2]
        return int(major), int(minor)

    class Config:
        env_prefix = ""
        extra = "ignore"
        populate_by_name = True
