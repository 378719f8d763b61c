"""Endpoint strategy base class and chain evaluation."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional

import requests
import structlog
from docker import DockerClient
from docker.errors import DockerException

from ...config import Settings, settings as default_settings
from ...models.endpoint import EndpointConfig
from ...models.errors import NoValidConfigurationError, StrategyUnavailable

logger = structlog.get_logger(__name__)


def create_docker_client(
    endpoint: EndpointConfig,
    settings: Optional[Settings] = None,
    timeout: Optional[int] = None,
) -> DockerClient:
    """Build a Docker SDK client for an endpoint.

    Args:
        endpoint: Resolved endpoint
        settings: Settings supplying the API version and default timeout
        timeout: Per-request timeout override in seconds

    Returns:
        A new DockerClient
    """
    settings = settings or default_settings
    return DockerClient(
        base_url=endpoint.raw_uri,
        version=settings.docker_api_version,
        timeout=timeout or settings.docker_client_timeout,
        tls=endpoint.tls_config() or False,
    )


class EndpointStrategy(ABC):
    """One source of Docker endpoint configuration.

    Subclasses implement ``candidate()`` to read their source; ``resolve()``
    then checks that the daemon behind the candidate answers a ping.
    """

    name = "endpoint"

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or default_settings

    @abstractmethod
    def candidate(self) -> EndpointConfig:
        """Build an endpoint from this strategy's source.

        Raises:
            StrategyUnavailable: If the source does not apply here
        """

    def unavailable(self, reason: str) -> StrategyUnavailable:
        return StrategyUnavailable(self.name, reason)

    def verify(self, endpoint: EndpointConfig) -> None:
        """Ping the daemon behind an endpoint.

        Raises:
            StrategyUnavailable: If the daemon cannot be reached
        """
        client = None
        try:
            client = create_docker_client(
                endpoint, self._settings, timeout=self._settings.strategy_probe_timeout
            )
            client.ping()
        except (DockerException, requests.RequestException) as e:
            raise self.unavailable(f"{endpoint.raw_uri} is not reachable ({e})")
        finally:
            if client is not None:
                client.close()

    def resolve(self) -> EndpointConfig:
        """Produce a verified endpoint.

        Raises:
            StrategyUnavailable: If the source does not apply or is unreachable
        """
        endpoint = self.candidate()
        self.verify(endpoint)
        return endpoint

    def __repr__(self):
        return f"{type(self).__name__}()"


@dataclass
class StrategyAttempt:
    """Outcome of trying one strategy."""

    strategy: str
    endpoint: Optional[EndpointConfig] = None
    error: Optional[StrategyUnavailable] = None

    @property
    def succeeded(self) -> bool:
        return self.endpoint is not None


def resolve_first_valid(strategies: Iterable[EndpointStrategy]) -> EndpointConfig:
    """Try strategies in order and return the first endpoint that works.

    Args:
        strategies: Strategies in priority order

    Returns:
        The first verified endpoint

    Raises:
        NoValidConfigurationError: If every strategy is unavailable
    """
    attempts: List[StrategyAttempt] = []
    for strategy in strategies:
        try:
            endpoint = strategy.resolve()
        except StrategyUnavailable as e:
            logger.debug(
                "Endpoint strategy unavailable", strategy=strategy.name, reason=e.reason
            )
            attempts.append(StrategyAttempt(strategy=strategy.name, error=e))
            continue

        attempts.append(StrategyAttempt(strategy=strategy.name, endpoint=endpoint))
        logger.info(
            "Found Docker environment",
            strategy=strategy.name,
            endpoint=endpoint.raw_uri,
            tried=len(attempts),
        )
        return endpoint

    failures = [a.error for a in attempts if a.error is not None]
    logger.error(
        "Could not find a valid Docker environment",
        strategies=[a.strategy for a in attempts],
    )
    raise NoValidConfigurationError(failures)
