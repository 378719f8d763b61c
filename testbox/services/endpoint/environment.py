"""Explicit endpoint configuration from DOCKER_* settings."""

from ...models.endpoint import EndpointConfig
from .base import EndpointStrategy


class EnvironmentConfigurationStrategy(EndpointStrategy):
    """Uses ``DOCKER_HOST``, ``DOCKER_TLS_VERIFY`` and ``DOCKER_CERT_PATH``.

    Values come from the process environment or the ``.env`` file. This
    strategy runs first so that an explicit setting always wins over
    anything auto-detected.
    """

    name = "environment"

    def candidate(self) -> EndpointConfig:
        host = self._settings.docker_host
        if not host:
            raise self.unavailable("DOCKER_HOST is not set")

        return EndpointConfig.from_uri(
            host,
            tls_verify=self._settings.docker_tls_verify,
            cert_path=self._settings.docker_cert_path,
            source=self.name,
        )
