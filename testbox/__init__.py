"""testbox - reliable Docker access for throwaway test containers.

Finds a working Docker endpoint, hands out a validated client, classifies
container state and starts containers with retries.

Usage:
    from testbox import DockerClientFactory, ContainerSpec, StartRetryCoordinator

    client = DockerClientFactory.instance().client()
    with StartRetryCoordinator(ContainerSpec("nginx:alpine")) as container:
        ...
"""

from .models import (
    ContainerStateSnapshot,
    EndpointConfig,
    EndpointScheme,
    PreconditionResult,
    TestboxException,
)
from .services.container import (
    ContainerSpec,
    DockerClientFactory,
    LifecycleHooks,
    StartRetryCoordinator,
    is_container_running,
    is_container_stopped,
    is_docker_timestamp_empty,
)

__version__ = "0.1.0"

__all__ = [
    "ContainerSpec",
    "ContainerStateSnapshot",
    "DockerClientFactory",
    "EndpointConfig",
    "EndpointScheme",
    "LifecycleHooks",
    "PreconditionResult",
    "StartRetryCoordinator",
    "TestboxException",
    "is_container_running",
    "is_container_stopped",
    "is_docker_timestamp_empty",
    "__version__",
]
