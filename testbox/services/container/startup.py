"""Container startup with retries.

A container is described by a ``ContainerSpec`` and customized through
``LifecycleHooks`` callbacks:

- ``configure(spec)`` runs exactly once per coordinator, before the first
  start attempt. Anything it adds to the spec (file mappings, environment)
  is applied once even if the container has to be started several times.
- ``container_is_starting(container)`` runs on every start attempt, after
  the container has been started. Raising from it fails that attempt.
- ``container_is_started(container)`` runs once the container is running.

Failed attempts are cleaned up and retried up to ``attempts`` times; after
that ``StartupFailedError`` is raised with the last failure as its cause.
A coordinator is not safe for concurrent ``start()`` calls; separate
coordinators are fully independent.
"""

import threading
import time
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import structlog
from docker import DockerClient
from docker.models.containers import Container

from ...config import Settings, settings as default_settings
from ...models.errors import DuplicateMountError, StartupFailedError
from .client import DockerClientFactory
from .utils import remove_container_quietly, wait_for_container_running

logger = structlog.get_logger(__name__)


@dataclass
class ContainerSpec:
    """What to create: image, command, environment, labels, mounts and ports."""

    image: str
    command: Optional[List[str]] = None
    environment: Dict[str, str] = field(default_factory=dict)
    labels: Dict[str, str] = field(default_factory=dict)
    volumes: Dict[str, Dict[str, str]] = field(default_factory=dict)
    exposed_ports: List[int] = field(default_factory=list)

    def with_command(self, *command: str) -> "ContainerSpec":
        self.command = list(command)
        return self

    def with_env(self, name: str, value: str) -> "ContainerSpec":
        self.environment[name] = value
        return self

    def with_label(self, name: str, value: str) -> "ContainerSpec":
        self.labels[name] = value
        return self

    def with_exposed_ports(self, *ports: int) -> "ContainerSpec":
        self.exposed_ports.extend(ports)
        return self

    def with_file_mapping(
        self, host_path: Union[str, Path], container_path: str, mode: str = "ro"
    ) -> "ContainerSpec":
        """Bind a host file or directory into the container.

        Raises:
            DuplicateMountError: If ``container_path`` is already bound
        """
        if any(v["bind"] == container_path for v in self.volumes.values()):
            raise DuplicateMountError(container_path)
        self.volumes[str(Path(host_path).resolve())] = {"bind": container_path, "mode": mode}
        return self

    def create_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``client.containers.create``."""
        kwargs: Dict[str, Any] = {"image": self.image, "detach": True}
        if self.command:
            kwargs["command"] = self.command
        if self.environment:
            kwargs["environment"] = dict(self.environment)
        if self.labels:
            kwargs["labels"] = dict(self.labels)
        if self.volumes:
            kwargs["volumes"] = {k: dict(v) for k, v in self.volumes.items()}
        if self.exposed_ports:
            # None publishes each port on a random host port
            kwargs["ports"] = {f"{port}/tcp": None for port in self.exposed_ports}
        return kwargs


@dataclass
class LifecycleHooks:
    """Caller-supplied callbacks around container startup."""

    configure: Optional[Callable[[ContainerSpec], None]] = None
    container_is_starting: Optional[Callable[[Container], None]] = None
    container_is_started: Optional[Callable[[Container], None]] = None


class StartPhase(str, Enum):
    NOT_STARTED = "not_started"
    CONFIGURED = "configured"
    STARTING = "starting"
    RUNNING = "running"
    FAILED = "failed"


@dataclass
class RetryState:
    """Per-container startup state."""

    setup_ran: bool = False
    attempts: int = 0
    phase: StartPhase = StartPhase.NOT_STARTED
    last_error: Optional[BaseException] = None


class StartRetryCoordinator:
    """Starts one container, retrying transient start failures."""

    def __init__(
        self,
        spec: ContainerSpec,
        hooks: Optional[LifecycleHooks] = None,
        client_provider: Optional[Callable[[], DockerClient]] = None,
        attempts: Optional[int] = None,
        retry_interval: Optional[float] = None,
        startup_timeout: Optional[float] = None,
        minimum_running_duration: Optional[Union[timedelta, float]] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize the coordinator.

        Args:
            spec: Container to create
            hooks: Lifecycle callbacks
            client_provider: Returns the Docker client to use; defaults to the
                shared DockerClientFactory
            attempts: Maximum start attempts (``start_attempts`` setting)
            retry_interval: Seconds between attempts (``start_retry_interval``)
            startup_timeout: Seconds to wait for the running state per attempt
            minimum_running_duration: How long the container must have been
                running before an attempt counts as successful
            settings: Settings override
        """
        settings = settings or default_settings
        self.spec = spec
        self.hooks = hooks or LifecycleHooks()
        self._client_provider = client_provider or (
            lambda: DockerClientFactory.instance().client()
        )
        self._attempts = attempts if attempts is not None else settings.start_attempts
        if self._attempts < 1:
            raise ValueError("attempts must be at least 1")
        self._retry_interval = (
            retry_interval if retry_interval is not None else settings.start_retry_interval
        )
        self._startup_timeout = (
            startup_timeout if startup_timeout is not None else settings.startup_timeout
        )
        self._minimum_running_duration = minimum_running_duration

        self.state = RetryState()
        self.container: Optional[Container] = None
        self._setup_lock = threading.Lock()

    @property
    def phase(self) -> StartPhase:
        return self.state.phase

    def _configure_once(self) -> None:
        with self._setup_lock:
            if self.state.setup_ran:
                return
            if self.hooks.configure is not None:
                self.hooks.configure(self.spec)
            self.state.setup_ran = True
            self.state.phase = StartPhase.CONFIGURED

    def _attempt_start(self, client: DockerClient) -> Container:
        container = client.containers.create(**self.spec.create_kwargs())
        try:
            container.start()
            if self.hooks.container_is_starting is not None:
                self.hooks.container_is_starting(container)
            wait_for_container_running(
                container,
                timeout=self._startup_timeout,
                minimum_running_duration=self._minimum_running_duration,
            )
            if self.hooks.container_is_started is not None:
                self.hooks.container_is_started(container)
        except Exception:
            remove_container_quietly(container)
            raise
        return container

    def start(self) -> Container:
        """Configure (once) and start the container.

        Returns:
            The running container

        Raises:
            StartupFailedError: If every attempt failed
        """
        if self.state.phase == StartPhase.RUNNING and self.container is not None:
            return self.container

        self._configure_once()
        client = self._client_provider()

        last_error: Optional[BaseException] = None
        for attempt in range(1, self._attempts + 1):
            self.state.attempts += 1
            self.state.phase = StartPhase.STARTING
            try:
                container = self._attempt_start(client)
            except Exception as e:
                last_error = e
                self.state.last_error = e
                logger.warning(
                    "Container start attempt failed",
                    image=self.spec.image,
                    attempt=attempt,
                    max_attempts=self._attempts,
                    error=str(e),
                    error_class=type(e).__name__,
                )
                if attempt < self._attempts and self._retry_interval > 0:
                    time.sleep(self._retry_interval)
                continue

            self.container = container
            self.state.phase = StartPhase.RUNNING
            logger.info(
                "Container started",
                image=self.spec.image,
                container_id=container.id[:12],
                attempt=attempt,
            )
            return container

        self.state.phase = StartPhase.FAILED
        logger.error(
            "Container startup failed",
            image=self.spec.image,
            attempts=self._attempts,
            error=str(last_error),
        )
        raise StartupFailedError(self.spec.image, self._attempts, last_error) from last_error

    def stop(self) -> None:
        """Remove the container. A later ``start()`` does not re-run ``configure``."""
        if self.container is not None:
            remove_container_quietly(self.container)
            logger.debug("Container removed", container_id=self.container.id[:12])
        self.container = None
        if self.state.setup_ran:
            self.state.phase = StartPhase.CONFIGURED
        else:
            self.state.phase = StartPhase.NOT_STARTED

    def __enter__(self) -> Container:
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
