"""Docker environment precondition checks.

Run once against a freshly built client before it is handed out:

- the daemon must be Docker 1.6.0 or newer;
- the Docker environment should have at least 2 GB of free disk space.

A version or disk space failure aborts client acquisition. Any other problem
while measuring disk space (pull failure, odd ``df`` output, API errors) only
produces a warning, because the measurement itself is best effort.
"""

from typing import Optional, Tuple

import structlog
from docker import DockerClient

from ...config import Settings, settings as default_settings
from ...models.errors import (
    DiskSpaceReportError,
    InsufficientDiskSpaceError,
    UnsupportedRuntimeVersionError,
)
from ...models.preconditions import DiskCheckStatus, DiskSpaceCheck, PreconditionResult
from .utils import image_present, pull_image, remove_container_quietly

logger = structlog.get_logger(__name__)

# `df -P` (POSIX output format) columns:
# Filesystem 1024-blocks Used Available Capacity Mounted-on
DF_AVAILABLE_COLUMN = 3
DF_CAPACITY_COLUMN = 4
DF_MOUNT_COLUMN = 5


def parse_version(version: str) -> Tuple[int, int]:
    """Parse the major and minor components of a dotted version string.

    Anything after the minor component is ignored.

    Raises:
        ValueError: If the major or minor component is not an integer
    """
    parts = version.strip().split(".")
    if len(parts) < 2:
        raise ValueError(f"Invalid Docker version: {version!r}")
    return int(parts[0]), int(parts[1])


def parse_df_output(output: str) -> Tuple[int, int]:
    """Find the root filesystem row of a ``df -P`` report.

    Args:
        output: Raw ``df -P`` stdout

    Returns:
        (available_kb, used_percent) for the ``/`` mount

    Raises:
        DiskSpaceReportError: If there is no parseable root row
    """
    for line in output.splitlines():
        fields = line.split()
        if len(fields) <= DF_MOUNT_COLUMN or fields[DF_MOUNT_COLUMN] != "/":
            continue
        try:
            available_kb = int(fields[DF_AVAILABLE_COLUMN])
            used_percent = int(fields[DF_CAPACITY_COLUMN].rstrip("%"))
        except ValueError:
            raise DiskSpaceReportError(f"Unparseable root filesystem row: {line!r}")
        return available_kb, used_percent
    raise DiskSpaceReportError()


class PreconditionValidator:
    """Checks Docker version and free disk space for a live client."""

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or default_settings

    def check_version(self, version: str) -> None:
        """Fail if the daemon version is below the configured minimum.

        Raises:
            UnsupportedRuntimeVersionError: If the version is too old
            ValueError: If the version string is malformed
        """
        major, minor = parse_version(version)
        min_major, min_minor = self._settings.min_version_tuple
        if major < min_major or (major == min_major and minor < min_minor):
            raise UnsupportedRuntimeVersionError(version, self._settings.min_docker_version)

    def check_disk_space(self, client: DockerClient) -> DiskSpaceCheck:
        """Measure free disk space by running ``df -P`` in a throwaway container.

        Raises:
            InsufficientDiskSpaceError: If less than ``min_free_disk_mb`` is free
        """
        image = self._settings.disk_check_image
        if not image_present(client, image):
            pull_image(client, image, timeout=self._settings.image_pull_timeout)

        container = client.containers.create(image, command=["df", "-P"])
        try:
            container.start()
            container.wait()
            output = container.logs(stdout=True, stderr=False)
            if isinstance(output, bytes):
                output = output.decode("utf-8", errors="replace")

            available_kb, used_percent = parse_df_output(output)
            available_mb = available_kb // 1024

            logger.info(
                "Disk utilization in Docker environment",
                used_percent=used_percent,
                available_mb=available_mb,
            )

            if available_mb < self._settings.min_free_disk_mb:
                logger.error(
                    "Docker environment has too little free disk space - "
                    "execution is unlikely to succeed so will be aborted",
                    available_mb=available_mb,
                    required_mb=self._settings.min_free_disk_mb,
                )
                raise InsufficientDiskSpaceError(
                    available_mb, self._settings.min_free_disk_mb
                )

            return DiskSpaceCheck(
                status=DiskCheckStatus.OK,
                available_mb=available_mb,
                used_percent=used_percent,
            )
        finally:
            remove_container_quietly(container)

    def check_disk_space_and_handle_exceptions(self, client: DockerClient) -> DiskSpaceCheck:
        """Run the disk space check, downgrading incidental errors to warnings."""
        try:
            return self.check_disk_space(client)
        except InsufficientDiskSpaceError:
            raise
        except Exception as e:
            logger.warning(
                "Encountered and ignored error while checking disk space",
                error=str(e),
                error_class=type(e).__name__,
            )
            return DiskSpaceCheck(status=DiskCheckStatus.INCONCLUSIVE, detail=str(e))

    def validate(self, client: DockerClient) -> PreconditionResult:
        """Run all precondition checks against a live client.

        Raises:
            UnsupportedRuntimeVersionError: If the daemon is too old
            InsufficientDiskSpaceError: If there is not enough free disk space
        """
        version = client.version().get("Version", "")
        self.check_version(version)
        logger.debug("Docker version check passed", docker_version=version)

        if self._settings.disk_check_enabled:
            disk = self.check_disk_space_and_handle_exceptions(client)
        else:
            disk = DiskSpaceCheck(status=DiskCheckStatus.SKIPPED)

        return PreconditionResult(
            version_ok=True,
            disk_ok=disk.ok,
            docker_version=version,
            disk=disk,
        )
