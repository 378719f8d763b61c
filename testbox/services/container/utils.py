"""Shared utilities for container operations.

This module contains the blocking helpers used by the precondition checks
and the startup coordinator.
"""

import threading
import time
from datetime import timedelta
from typing import List, Optional, Tuple, Union

import structlog
from docker import DockerClient
from docker.errors import DockerException, NotFound
from docker.models.containers import Container

from ...models.errors import ContainerNotRunningError, ImagePullTimeoutError
from ...models.state import ContainerStateSnapshot
from .status import is_container_running, is_container_stopped

logger = structlog.get_logger(__name__)


def snapshot(container: Container) -> ContainerStateSnapshot:
    """Reload a container and return its current state snapshot."""
    container.reload()
    return ContainerStateSnapshot.from_inspect(container.attrs)


def wait_for_container_running(
    container: Container,
    timeout: float = 30.0,
    interval: float = 0.1,
    minimum_running_duration: Optional[Union[timedelta, float]] = None,
) -> bool:
    """
    Wait for a container to reach the running state.

    Args:
        container: Docker container to wait for
        timeout: Maximum time to wait in seconds
        interval: Polling interval in seconds
        minimum_running_duration: How long the container must have been
            running before it counts

    Returns:
        True once the container is running

    Raises:
        ContainerNotRunningError: If the container stops or the timeout expires
    """
    deadline = time.monotonic() + timeout

    while True:
        state = snapshot(container)
        if is_container_running(state, minimum_running_duration):
            return True
        if is_container_stopped(state):
            raise ContainerNotRunningError(
                container.id, f"container exited (finished at {state.finished_at})"
            )
        if time.monotonic() >= deadline:
            raise ContainerNotRunningError(
                container.id, f"not running after {timeout:g}s"
            )
        time.sleep(interval)


def split_image_reference(reference: str) -> Tuple[str, Optional[str]]:
    """Split ``repo[:tag]`` into (repo, tag), defaulting the tag to latest."""
    last_part = reference.rsplit("/", 1)[-1]
    if "@" not in reference and ":" in last_part:
        repo, tag = reference.rsplit(":", 1)
        return repo, tag
    return reference, None if "@" in reference else "latest"


def image_present(client: DockerClient, reference: str) -> bool:
    """Check whether an image tag exists locally."""
    repo, tag = split_image_reference(reference)
    wanted = f"{repo}:{tag}" if tag else repo
    for image in client.images.list():
        tags: List[str] = image.tags or []
        if wanted in tags:
            return True
    return False


def pull_image(client: DockerClient, reference: str, timeout: float) -> None:
    """
    Pull an image, blocking until the pull stream completes.

    The pull runs on a worker thread; the caller waits on a one-shot latch
    that fires when the progress stream ends.

    Args:
        client: Docker client
        reference: Image reference (``repo:tag``)
        timeout: Seconds to wait for completion

    Raises:
        ImagePullTimeoutError: If the pull does not finish in time
        DockerException: Any error raised by the pull itself
    """
    repo, tag = split_image_reference(reference)
    done = threading.Event()
    errors: List[BaseException] = []
    progress = {"events": 0}

    def _pull():
        try:
            for event in client.api.pull(repo, tag=tag, stream=True, decode=True):
                progress["events"] += 1
                if isinstance(event, dict) and event.get("error"):
                    raise DockerException(event["error"])
        except Exception as e:
            errors.append(e)
        finally:
            done.set()

    logger.info("Pulling image", image=reference)
    worker = threading.Thread(target=_pull, name=f"testbox-pull-{repo}", daemon=True)
    worker.start()

    if not done.wait(timeout):
        logger.warning(
            "Image pull timed out",
            image=reference,
            timeout=timeout,
            events=progress["events"],
        )
        raise ImagePullTimeoutError(reference, timeout)

    if errors:
        raise errors[0]
    logger.debug("Image pulled", image=reference, events=progress["events"])


def remove_container_quietly(container: Optional[Container]) -> bool:
    """Force-remove a container, swallowing Docker errors.

    Returns:
        True if the container was removed (or already gone)
    """
    if container is None:
        return False
    try:
        container.remove(force=True)
        return True
    except NotFound:
        return True
    except DockerException as e:
        logger.debug(
            "Ignoring container removal failure",
            container_id=(container.id or "")[:12],
            error=str(e),
        )
        return False
