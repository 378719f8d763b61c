"""Unit tests for settings loading."""

import pytest
from pydantic import ValidationError

from testbox.config import DockerConfig, LoggingConfig


class TestDefaults:
    """Test default values."""

    def test_defaults(self, make_settings):
        settings = make_settings()

        assert settings.docker_host is None
        assert settings.docker_tls_verify is False
        assert settings.docker_socket_path == "/var/run/docker.sock"
        assert settings.min_docker_version == "1.6"
        assert settings.min_version_tuple == (1, 6)
        assert settings.disk_check_image == "alpine:3.2"
        assert settings.min_free_disk_mb == 2048
        assert settings.start_attempts == 3
        assert settings.log_format == "console"


class TestEnvironment:
    """Test reading the process environment."""

    def test_docker_variables(self, make_settings, clean_env):
        clean_env.setenv("DOCKER_HOST", "tcp://10.0.0.5:2376")
        clean_env.setenv("DOCKER_TLS_VERIFY", "1")
        clean_env.setenv("DOCKER_CERT_PATH", "/certs")

        settings = make_settings()

        assert settings.docker_host == "tcp://10.0.0.5:2376"
        assert settings.docker_tls_verify is True
        assert settings.docker_cert_path == "/certs"

    def test_blank_docker_variables_are_unset(self, make_settings, clean_env):
        clean_env.setenv("DOCKER_HOST", "")
        clean_env.setenv("DOCKER_TLS_VERIFY", "")
        clean_env.setenv("DOCKER_CERT_PATH", "  ")

        settings = make_settings()

        assert settings.docker_host is None
        assert settings.docker_tls_verify is False
        assert settings.docker_cert_path is None

    def test_prefixed_variables(self, make_settings, clean_env):
        clean_env.setenv("TESTBOX_MIN_FREE_DISK_MB", "512")
        clean_env.setenv("TESTBOX_DISK_CHECK_ENABLED", "false")
        clean_env.setenv("TESTBOX_LOG_LEVEL", "debug")
        clean_env.setenv("TESTBOX_LOG_FORMAT", "JSON")

        settings = make_settings()

        assert settings.min_free_disk_mb == 512
        assert settings.disk_check_enabled is False
        assert settings.log_level == "DEBUG"
        assert settings.log_format == "json"


class TestValidation:
    """Test value validation."""

    @pytest.mark.parametrize("value", ["1", "one.six", "x.1"])
    def test_bad_min_version(self, make_settings, value):
        with pytest.raises(ValidationError):
            make_settings(min_docker_version=value)

    def test_bad_log_format(self, make_settings):
        with pytest.raises(ValidationError):
            make_settings(log_format="xml")

    def test_attempts_must_be_positive(self, make_settings):
        with pytest.raises(ValidationError):
            make_settings(start_attempts=0)

    def test_min_version_tuple(self, make_settings):
        assert make_settings(min_docker_version="20.10.3").min_version_tuple == (20, 10)


class TestGroupedAccess:
    """Test the grouped config views."""

    def test_docker_group(self, make_settings):
        settings = make_settings(docker_host="unix:///tmp/docker.sock", min_free_disk_mb=10)
        docker = settings.docker

        assert isinstance(docker, DockerConfig)
        assert docker.docker_host == "unix:///tmp/docker.sock"
        assert docker.min_free_disk_mb == 10
        assert docker.start_retry_interval == settings.start_retry_interval

    def test_docker_group_keeps_validation(self, make_settings):
        docker = make_settings(docker_host="tcp://10.0.0.5:2376", docker_tls_verify=True).docker

        assert docker.docker_tls_verify is True
        assert docker.min_version_tuple == (1, 6)

    def test_standalone_docker_group_reads_blank_variables(self, clean_env):
        clean_env.setenv("DOCKER_HOST", "")
        clean_env.setenv("DOCKER_TLS_VERIFY", "")

        docker = DockerConfig()

        assert docker.docker_host is None
        assert docker.docker_tls_verify is False

    def test_standalone_logging_group_normalizes(self, clean_env):
        clean_env.setenv("TESTBOX_LOG_LEVEL", "debug")

        assert LoggingConfig().log_level == "DEBUG"
        with pytest.raises(ValidationError):
            LoggingConfig(log_format="xml")

    def test_logging_group(self, make_settings):
        logging_config = make_settings(log_level="warning").logging

        assert isinstance(logging_config, LoggingConfig)
        assert logging_config.log_level == "WARNING"
