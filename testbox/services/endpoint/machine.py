"""Endpoint discovery through docker-machine."""

import shlex
import shutil
import subprocess
from typing import Dict, List

import structlog

from ...models.endpoint import EndpointConfig
from .base import EndpointStrategy

logger = structlog.get_logger(__name__)

MACHINE_COMMAND_TIMEOUT = 30


def parse_env_exports(output: str) -> Dict[str, str]:
    """Parse ``export NAME="value"`` lines from ``docker-machine env --shell sh``."""
    env: Dict[str, str] = {}
    for line in output.splitlines():
        line = line.strip()
        if not line.startswith("export "):
            continue
        name, sep, value = line[len("export "):].partition("=")
        if not sep:
            continue
        parts = shlex.split(value)
        env[name.strip()] = parts[0] if parts else ""
    return env


class DockerMachineConfigurationStrategy(EndpointStrategy):
    """Asks docker-machine for the environment of a running machine."""

    name = "docker-machine"

    def _run(self, *args: str) -> str:
        binary = shutil.which(self._settings.docker_machine_binary)
        if binary is None:
            raise self.unavailable(
                f"{self._settings.docker_machine_binary} is not installed"
            )
        command: List[str] = [binary, *args]
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=MACHINE_COMMAND_TIMEOUT,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            raise self.unavailable(
                f"'{' '.join(args)}' exited with {e.returncode}: {(e.stderr or '').strip()}"
            )
        except (OSError, subprocess.TimeoutExpired, UnicodeDecodeError) as e:
            raise self.unavailable(f"'{' '.join(args)}' failed: {e}")
        return result.stdout

    def machine_name(self) -> str:
        """Configured machine name, or the first machine docker-machine knows."""
        if self._settings.docker_machine_name:
            return self._settings.docker_machine_name

        machines = [m.strip() for m in self._run("ls", "-q").splitlines() if m.strip()]
        if not machines:
            raise self.unavailable("no docker machines exist")
        if len(machines) > 1:
            logger.debug(
                "Multiple docker machines found, using the first",
                machines=machines,
            )
        return machines[0]

    def candidate(self) -> EndpointConfig:
        name = self.machine_name()

        status = self._run("status", name).strip()
        if status.lower() != "running":
            raise self.unavailable(f"machine '{name}' is not running (status: {status})")

        try:
            env = parse_env_exports(self._run("env", "--shell", "sh", name))
        except ValueError as e:
            raise self.unavailable(f"unreadable environment for machine '{name}': {e}")
        host = env.get("DOCKER_HOST")
        if not host:
            raise self.unavailable(f"machine '{name}' did not report DOCKER_HOST")

        logger.debug("Using docker machine", machine=name, docker_host=host)
        return EndpointConfig.from_uri(
            host,
            tls_verify=env.get("DOCKER_TLS_VERIFY", "") not in ("", "0"),
            cert_path=env.get("DOCKER_CERT_PATH") or None,
            source=self.name,
        )
