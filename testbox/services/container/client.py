"""Docker client factory.

Process-wide provider of an initialized Docker client. The endpoint is
resolved through the strategy chain on first use and cached for the life of
the process; precondition checks run once, on the first client built.
"""

import threading
from typing import List, Optional

import requests
import structlog
from docker import DockerClient
from docker.errors import DockerException

from ...config import Settings, settings as default_settings
from ...models.endpoint import EndpointConfig
from ...models.errors import RuntimeClientError, RuntimeUnreachableError, TestboxException
from ...models.preconditions import PreconditionResult
from ..endpoint import (
    EndpointStrategy,
    create_docker_client,
    default_strategies,
    resolve_first_valid,
)
from .preconditions import PreconditionValidator

logger = structlog.get_logger(__name__)

RUNTIME_ERRORS = (DockerException, requests.RequestException)


class DockerClientFactory:
    """Singleton provider of initialized Docker clients.

    Use ``DockerClientFactory.instance()`` in application code. The
    constructor is public so tests can build isolated factories with their
    own strategies, validator and settings; ``reset_instance()`` drops the
    shared one.
    """

    _instance: Optional["DockerClientFactory"] = None
    _instance_lock = threading.Lock()

    def __init__(
        self,
        strategies: Optional[List[EndpointStrategy]] = None,
        validator: Optional[PreconditionValidator] = None,
        settings: Optional[Settings] = None,
    ):
        self._settings = settings or default_settings
        self._strategies = (
            strategies if strategies is not None else default_strategies(self._settings)
        )
        self._validator = validator or PreconditionValidator(self._settings)
        self._lock = threading.RLock()

        self._endpoint: Optional[EndpointConfig] = None
        self._client: Optional[DockerClient] = None
        self._preconditions: Optional[PreconditionResult] = None
        self._precondition_error: Optional[TestboxException] = None

    @classmethod
    def instance(cls) -> "DockerClientFactory":
        """Return the process-wide factory, creating it on first use."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the process-wide factory, closing its client."""
        with cls._instance_lock:
            if cls._instance is not None:
                cls._instance.close()
            cls._instance = None

    @property
    def endpoint(self) -> Optional[EndpointConfig]:
        """Cached endpoint, or None before the first resolution."""
        return self._endpoint

    @property
    def preconditions(self) -> Optional[PreconditionResult]:
        """Cached precondition results, or None before the first client."""
        return self._preconditions

    def _resolve_endpoint(self) -> EndpointConfig:
        with self._lock:
            if self._endpoint is None:
                self._endpoint = resolve_first_valid(self._strategies)
            return self._endpoint

    def _check_preconditions(self, client: DockerClient) -> None:
        if self._precondition_error is not None:
            raise self._precondition_error
        if self._preconditions is not None:
            return
        try:
            self._preconditions = self._validator.validate(client)
        except TestboxException as e:
            if e.fatal:
                self._precondition_error = e
            raise
        logger.info(
            "Docker environment preconditions checked",
            docker_version=self._preconditions.docker_version,
            disk_status=(
                self._preconditions.disk.status.value if self._preconditions.disk else None
            ),
        )

    def _ping(self, client: DockerClient, endpoint: EndpointConfig) -> None:
        try:
            client.ping()
        except RUNTIME_ERRORS as e:
            logger.error("Docker daemon did not answer ping", endpoint=endpoint.raw_uri)
            raise RuntimeUnreachableError(
                endpoint.raw_uri,
                f"Docker daemon at {endpoint.raw_uri} is not responding: {e}",
            ) from e

    def client(self, fail_fast: bool = True) -> DockerClient:
        """Return an initialized Docker client.

        Args:
            fail_fast: Ping the daemon and fail if it has gone away

        Returns:
            The shared DockerClient for the resolved endpoint

        Raises:
            NoValidConfigurationError: If no endpoint strategy works
            UnsupportedRuntimeVersionError: If the daemon is too old
            InsufficientDiskSpaceError: If the Docker environment is low on disk
            RuntimeUnreachableError: If ``fail_fast`` and the ping fails
            RuntimeClientError: For any other Docker client failure
        """
        with self._lock:
            endpoint = self._resolve_endpoint()
            try:
                if self._client is None:
                    self._client = create_docker_client(endpoint, self._settings)
                    logger.debug("Created Docker client", endpoint=endpoint.raw_uri)

                self._check_preconditions(self._client)

                if fail_fast:
                    self._ping(self._client, endpoint)
            except RUNTIME_ERRORS as e:
                raise RuntimeClientError(f"Docker client failure: {e}") from e

            return self._client

    def docker_host_ip_address(self) -> Optional[str]:
        """IP address of the host running Docker.

        Returns:
            Host from a tcp/http/https endpoint, "localhost" for a unix
            socket, None for any other scheme
        """
        return self._resolve_endpoint().host_ip

    def close(self) -> None:
        """Close the cached client. The endpoint and preconditions stay cached."""
        with self._lock:
            if self._client is not None:
                try:
                    self._client.close()
                except RUNTIME_ERRORS as e:
                    logger.debug("Ignoring error while closing Docker client", error=str(e))
                self._client = None
