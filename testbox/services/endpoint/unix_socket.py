"""Endpoint discovery through the local Docker socket."""

import os
import stat

from ...models.endpoint import EndpointConfig
from .base import EndpointStrategy


class UnixSocketConfigurationStrategy(EndpointStrategy):
    """Uses the well-known local socket, ``/var/run/docker.sock`` by default."""

    name = "unix-socket"

    def candidate(self) -> EndpointConfig:
        path = self._settings.docker_socket_path
        try:
            mode = os.stat(path).st_mode
        except OSError as e:
            raise self.unavailable(f"{path} is not accessible ({e.strerror})")
        if not stat.S_ISSOCK(mode):
            raise self.unavailable(f"{path} is not a socket")

        return EndpointConfig.from_uri(f"unix://{path}", source=self.name)
