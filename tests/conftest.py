"""Pytest configuration and shared fixtures."""

import os
from unittest.mock import MagicMock

import pytest
from docker import DockerClient

# Keep the developer's Docker environment out of the module-level settings
for _var in ("DOCKER_HOST", "DOCKER_TLS_VERIFY", "DOCKER_CERT_PATH"):
    os.environ.pop(_var, None)

from testbox.config import Settings
from testbox.models.endpoint import EndpointConfig
from testbox.services.container.client import DockerClientFactory


DF_OUTPUT_TEMPLATE = (
    "Filesystem           1024-blocks    Used Available Capacity Mounted on\n"
    "overlay                 61255492 3391228 {available} {used}% /\n"
    "tmpfs                      65536       0     65536       0% /dev\n"
    "shm                        65536       0     65536       0% /dev/shm\n"
)


def df_output(available_kb: int, used_percent: int = 50) -> str:
    """Build a `df -P` report with the given root filesystem values."""
    return DF_OUTPUT_TEMPLATE.format(available=available_kb, used=used_percent)


@pytest.fixture
def df_report():
    """Builder for `df -P` reports."""
    return df_output


@pytest.fixture
def clean_env(monkeypatch):
    """Remove Docker and testbox variables from the environment."""
    for name in list(os.environ):
        if name.upper().startswith(("DOCKER_", "TESTBOX_")):
            monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def make_settings(clean_env):
    """Factory for Settings that ignore the .env file."""

    def _make(**overrides):
        return Settings(_env_file=None, **overrides)

    return _make


@pytest.fixture
def test_settings(make_settings):
    """Settings tuned for fast tests."""
    return make_settings(
        start_retry_interval=0,
        startup_timeout=1.0,
        image_pull_timeout=2.0,
    )


@pytest.fixture
def tcp_endpoint():
    return EndpointConfig.from_uri("tcp://192.168.99.100:2376", source="test")


@pytest.fixture
def mock_docker_client():
    """Mock Docker SDK client for testing."""
    client = MagicMock(spec=DockerClient)
    client.api = MagicMock()
    client.images = MagicMock()
    client.containers = MagicMock()

    client.ping.return_value = True
    client.version.return_value = {"Version": "24.0.7", "ApiVersion": "1.43"}
    client.images.list.return_value = []
    client.api.pull.return_value = iter([{"status": "Pulling from library/alpine"}])

    df_container = MagicMock()
    df_container.id = "df0123456789abcdef"
    df_container.wait.return_value = {"StatusCode": 0}
    df_container.logs.return_value = df_output(4194304).encode()
    client.containers.create.return_value = df_container

    return client


@pytest.fixture(autouse=True)
def reset_factory():
    """Make sure no test leaks the shared client factory."""
    DockerClientFactory.reset_instance()
    yield
    DockerClientFactory.reset_instance()
