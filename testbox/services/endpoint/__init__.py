"""Docker endpoint discovery.

This package provides the ordered endpoint strategy chain:
- base.py: EndpointStrategy base class and chain evaluation
- environment.py: explicit DOCKER_HOST / TLS settings
- machine.py: docker-machine managed VMs
- unix_socket.py: the local Docker socket
"""

from typing import List, Optional

from ...config import Settings
from .base import (
    EndpointStrategy,
    StrategyAttempt,
    create_docker_client,
    resolve_first_valid,
)
from .environment import EnvironmentConfigurationStrategy
from .machine import DockerMachineConfigurationStrategy
from .unix_socket import UnixSocketConfigurationStrategy


def default_strategies(settings: Optional[Settings] = None) -> List[EndpointStrategy]:
    """Strategies in priority order: explicit settings, docker-machine, local socket."""
    return [
        EnvironmentConfigurationStrategy(settings),
        DockerMachineConfigurationStrategy(settings),
        UnixSocketConfigurationStrategy(settings),
    ]


__all__ = [
    "EndpointStrategy",
    "StrategyAttempt",
    "EnvironmentConfigurationStrategy",
    "DockerMachineConfigurationStrategy",
    "UnixSocketConfigurationStrategy",
    "create_docker_client",
    "default_strategies",
    "resolve_first_valid",
]
