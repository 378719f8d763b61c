"""Container management services.

This package provides Docker container functionality split into:
- client.py: Docker client factory and initialization
- preconditions.py: version and disk space checks run on the first client
- status.py: container state classification
- startup.py: container startup with retries
- utils.py: Shared utilities for container operations
"""

from .client import DockerClientFactory
from .preconditions import PreconditionValidator
from .startup import (
    ContainerSpec,
    LifecycleHooks,
    RetryState,
    StartPhase,
    StartRetryCoordinator,
)
from .status import (
    is_container_running,
    is_container_stopped,
    is_docker_timestamp_empty,
    parse_docker_timestamp,
)
from .utils import pull_image, remove_container_quietly, wait_for_container_running

__all__ = [
    "DockerClientFactory",
    "PreconditionValidator",
    "ContainerSpec",
    "LifecycleHooks",
    "RetryState",
    "StartPhase",
    "StartRetryCoordinator",
    "is_container_running",
    "is_container_stopped",
    "is_docker_timestamp_empty",
    "parse_docker_timestamp",
    "pull_image",
    "remove_container_quietly",
    "wait_for_container_running",
]
