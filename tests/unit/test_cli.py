"""Unit tests for the testbox command line."""

import json
from unittest.mock import MagicMock, patch

import pytest
from docker.errors import NotFound

from testbox.cli import build_parser, main
from testbox.models.endpoint import EndpointConfig
from testbox.models.errors import NoValidConfigurationError, StrategyUnavailable
from testbox.models.preconditions import DiskCheckStatus, DiskSpaceCheck, PreconditionResult
from testbox.models.state import DOCKER_TIMESTAMP_ZERO


@pytest.fixture
def factory():
    factory = MagicMock()
    factory.endpoint = EndpointConfig.from_uri(
        "unix:///var/run/docker.sock", source="unix-socket"
    )
    factory.docker_host_ip_address.return_value = "localhost"
    factory.preconditions = PreconditionResult(
        version_ok=True,
        disk_ok=True,
        docker_version="24.0.7",
        disk=DiskSpaceCheck(status=DiskCheckStatus.OK, available_mb=4096, used_percent=50),
    )
    with patch("testbox.cli.DockerClientFactory") as factory_cls, patch(
        "testbox.cli.setup_logging"
    ):
        factory_cls.instance.return_value = factory
        yield factory


def container_with_state(**state):
    container = MagicMock()
    container.attrs = {"State": state}
    return container


class TestParser:
    """Test argument parsing."""

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_status_arguments(self):
        args = build_parser().parse_args(["status", "web", "--min-running", "2.5", "--json"])
        assert args.container == "web"
        assert args.min_running == 2.5
        assert args.json is True


class TestDoctor:
    """Test the doctor command."""

    def test_json_report(self, factory, capsys):
        assert main(["doctor", "--json"]) == 0

        report = json.loads(capsys.readouterr().out)
        assert report["endpoint"]["raw_uri"] == "unix:///var/run/docker.sock"
        assert report["host_ip"] == "localhost"
        assert report["preconditions"]["docker_version"] == "24.0.7"
        assert report["preconditions"]["disk"]["status"] == "ok"
        factory.client.assert_called_once_with(fail_fast=True)

    def test_no_fail_fast(self, factory, capsys):
        main(["doctor", "--no-fail-fast", "--json"])
        factory.client.assert_called_once_with(fail_fast=False)

    def test_table_report(self, factory, capsys):
        assert main(["doctor"]) == 0
        out = capsys.readouterr().out
        assert "unix:///var/run/docker.sock" in out
        assert "24.0.7" in out

    def test_failure_prints_error_response(self, factory, capsys):
        factory.client.side_effect = NoValidConfigurationError(
            [StrategyUnavailable("environment", "DOCKER_HOST is not set")]
        )

        assert main(["doctor", "--json"]) == 1

        payload = json.loads(capsys.readouterr().out)
        assert payload["error_type"] == "no_valid_configuration"
        assert payload["details"][0]["message"] == "DOCKER_HOST is not set"


class TestStatus:
    """Test the status command."""

    @pytest.mark.parametrize(
        "state,expected",
        [
            (
                {"Running": True, "StartedAt": "2024-05-01T11:59:00Z", "FinishedAt": DOCKER_TIMESTAMP_ZERO},
                "running",
            ),
            (
                {"Running": False, "StartedAt": "2024-05-01T11:59:00Z", "FinishedAt": "2024-05-01T11:59:30Z"},
                "stopped",
            ),
            (
                {"Running": False, "StartedAt": DOCKER_TIMESTAMP_ZERO, "FinishedAt": DOCKER_TIMESTAMP_ZERO},
                "not-started",
            ),
        ],
    )
    def test_classification(self, factory, capsys, state, expected):
        factory.client.return_value.containers.get.return_value = container_with_state(**state)

        assert main(["status", "web", "--json"]) == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload["container"] == "web"
        assert payload["status"] == expected

    def test_recently_started_container_is_starting(self, factory, capsys):
        factory.client.return_value.containers.get.return_value = container_with_state(
            Running=True, StartedAt="2999-01-01T00:00:00Z", FinishedAt=DOCKER_TIMESTAMP_ZERO
        )

        main(["status", "web", "--min-running", "5", "--json"])

        assert json.loads(capsys.readouterr().out)["status"] == "starting"

    def test_missing_container(self, factory, capsys):
        factory.client.return_value.containers.get.side_effect = NotFound("no such container")

        assert main(["status", "ghost", "--json"]) == 1

        payload = json.loads(capsys.readouterr().out)
        assert payload["error_type"] == "runtime_client"
        assert "ghost" in payload["error"]
