"""Unit tests for container helper functions."""

import threading
from unittest.mock import MagicMock

import pytest
from docker.errors import APIError, DockerException, NotFound

from testbox.models.errors import ContainerNotRunningError, ImagePullTimeoutError
from testbox.models.state import DOCKER_TIMESTAMP_ZERO
from testbox.services.container.utils import (
    image_present,
    pull_image,
    remove_container_quietly,
    split_image_reference,
    wait_for_container_running,
)


def inspect_attrs(running, started_at=DOCKER_TIMESTAMP_ZERO, finished_at=DOCKER_TIMESTAMP_ZERO):
    return {
        "State": {
            "Running": running,
            "Paused": False,
            "StartedAt": started_at,
            "FinishedAt": finished_at,
        }
    }


class TestImageReferences:
    """Test image reference handling."""

    @pytest.mark.parametrize(
        "reference,expected",
        [
            ("alpine:3.2", ("alpine", "3.2")),
            ("alpine", ("alpine", "latest")),
            ("localhost:5000/team/app", ("localhost:5000/team/app", "latest")),
            ("localhost:5000/team/app:1.0", ("localhost:5000/team/app", "1.0")),
            ("alpine@sha256:abcd", ("alpine@sha256:abcd", None)),
        ],
    )
    def test_split(self, reference, expected):
        assert split_image_reference(reference) == expected

    def test_image_present(self, mock_docker_client):
        mock_docker_client.images.list.return_value = [
            MagicMock(tags=[]),
            MagicMock(tags=["alpine:3.2", "alpine:latest"]),
        ]
        assert image_present(mock_docker_client, "alpine:3.2") is True
        assert image_present(mock_docker_client, "alpine") is True
        assert image_present(mock_docker_client, "redis:7") is False


class TestPullImage:
    """Test blocking image pulls."""

    def test_pull_completes(self, mock_docker_client):
        mock_docker_client.api.pull.return_value = iter(
            [{"status": "Pulling fs layer"}, {"status": "Download complete"}]
        )
        pull_image(mock_docker_client, "alpine:3.2", timeout=5)
        mock_docker_client.api.pull.assert_called_once_with(
            "alpine", tag="3.2", stream=True, decode=True
        )

    def test_error_event_raises(self, mock_docker_client):
        mock_docker_client.api.pull.return_value = iter([{"error": "pull access denied"}])
        with pytest.raises(DockerException, match="pull access denied"):
            pull_image(mock_docker_client, "private/app:1", timeout=5)

    def test_api_error_propagates(self, mock_docker_client):
        mock_docker_client.api.pull.side_effect = APIError("daemon unavailable")
        with pytest.raises(APIError):
            pull_image(mock_docker_client, "alpine:3.2", timeout=5)

    def test_timeout(self, mock_docker_client):
        release = threading.Event()

        def stalled_stream():
            yield {"status": "Pulling fs layer"}
            release.wait(5)

        mock_docker_client.api.pull.return_value = stalled_stream()
        try:
            with pytest.raises(ImagePullTimeoutError) as exc_info:
                pull_image(mock_docker_client, "alpine:3.2", timeout=0.05)
        finally:
            release.set()

        assert exc_info.value.fatal is False
        assert "alpine:3.2" in exc_info.value.message


class TestWaitForContainerRunning:
    """Test polling for the running state."""

    def test_returns_when_running(self):
        container = MagicMock()
        container.attrs = inspect_attrs(True, started_at="2024-05-01T11:59:00Z")

        assert wait_for_container_running(container, timeout=1, interval=0) is True
        container.reload.assert_called()

    def test_becomes_running(self):
        container = MagicMock()
        states = iter(
            [
                inspect_attrs(False),
                inspect_attrs(False),
                inspect_attrs(True, started_at="2024-05-01T11:59:00Z"),
            ]
        )

        def reload():
            container.attrs = next(states)

        container.reload.side_effect = reload

        assert wait_for_container_running(container, timeout=5, interval=0) is True
        assert container.reload.call_count == 3

    def test_exited_container_raises(self):
        container = MagicMock()
        container.id = "abc123"
        container.attrs = inspect_attrs(
            False, started_at="2024-05-01T11:59:00Z", finished_at="2024-05-01T11:59:01Z"
        )

        with pytest.raises(ContainerNotRunningError, match="exited"):
            wait_for_container_running(container, timeout=5, interval=0)

    def test_timeout_raises(self):
        container = MagicMock()
        container.id = "abc123"
        container.attrs = inspect_attrs(False)

        with pytest.raises(ContainerNotRunningError, match="not running after"):
            wait_for_container_running(container, timeout=0.05, interval=0.01)


class TestRemoveContainerQuietly:
    """Test best-effort container removal."""

    def test_removes(self):
        container = MagicMock()
        assert remove_container_quietly(container) is True
        container.remove.assert_called_once_with(force=True)

    def test_already_gone(self):
        container = MagicMock()
        container.remove.side_effect = NotFound("gone")
        assert remove_container_quietly(container) is True

    def test_error_is_swallowed(self):
        container = MagicMock()
        container.id = "abc123"
        container.remove.side_effect = APIError("busy")
        assert remove_container_quietly(container) is False

    def test_none(self):
        assert remove_container_quietly(None) is False
