"""Error models and exception classes for testbox.

Every exception carries an ``ErrorType`` tag and a ``fatal`` flag so callers
can tell recoverable outcomes (a strategy that does not apply, an
inconclusive disk check) from hard gates (no endpoint, unsupported version,
not enough disk space) without inspecting the class hierarchy.
"""

import time
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ErrorType(str, Enum):
    """Error type enumeration."""

    STRATEGY_UNAVAILABLE = "strategy_unavailable"
    NO_VALID_CONFIGURATION = "no_valid_configuration"
    UNSUPPORTED_VERSION = "unsupported_version"
    INSUFFICIENT_DISK_SPACE = "insufficient_disk_space"
    DISK_CHECK_INCONCLUSIVE = "disk_check_inconclusive"
    IMAGE_PULL_TIMEOUT = "image_pull_timeout"
    RUNTIME_UNREACHABLE = "runtime_unreachable"
    RUNTIME_CLIENT = "runtime_client"
    CONTAINER_NOT_RUNNING = "container_not_running"
    STARTUP_FAILED = "startup_failed"
    VALIDATION = "validation"
    INTERNAL = "internal"


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: Optional[str] = Field(None, description="Source of the detail, e.g. a strategy name")
    message: str = Field(..., description="Human-readable error message")
    code: Optional[str] = Field(None, description="Machine-readable error code")


class ErrorResponse(BaseModel):
    """Serializable error report."""

    error: str = Field(..., description="Main error message")
    error_type: ErrorType = Field(..., description="Error category")
    fatal: bool = Field(..., description="Whether the operation was aborted")
    details: Optional[List[ErrorDetail]] = Field(
        None, description="Additional error details"
    )
    timestamp: float = Field(default_factory=time.time, description="Error timestamp")

    class Config:
        use_enum_values = True


# Custom Exception Classes


class TestboxException(Exception):
    """Base exception for testbox."""

    __test__ = False  # keep pytest from collecting Test*-named classes

    fatal = True

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.INTERNAL,
        details: Optional[List[ErrorDetail]] = None,
    ):
        self.message = message
        self.error_type = error_type
        self.details = details or []
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert exception to error response model."""
        return ErrorResponse(
            error=self.message,
            error_type=self.error_type,
            fatal=self.fatal,
            details=self.details if self.details else None,
        )


class StrategyUnavailable(TestboxException):
    """An endpoint source does not apply to, or is unreachable in, this environment."""

    fatal = False

    def __init__(self, strategy: str, reason: str, **kwargs):
        self.strategy = strategy
        self.reason = reason
        super().__init__(
            message=f"{strategy}: {reason}",
            error_type=ErrorType.STRATEGY_UNAVAILABLE,
            **kwargs,
        )


class NoValidConfigurationError(TestboxException):
    """Every endpoint strategy failed."""

    def __init__(self, failures: Optional[List[StrategyUnavailable]] = None):
        failures = failures or []
        details = [
            ErrorDetail(field=f.strategy, message=f.reason, code=f.error_type.value)
            for f in failures
        ]
        summary = "; ".join(f.message for f in failures) or "no strategies configured"
        super().__init__(
            message=f"Could not find a valid Docker environment ({summary})",
            error_type=ErrorType.NO_VALID_CONFIGURATION,
            details=details,
        )
        self.failures = failures


class UnsupportedRuntimeVersionError(TestboxException):
    """The Docker daemon is older than the minimum supported version."""

    def __init__(self, version: str, minimum: str):
        self.version = version
        self.minimum = minimum
        super().__init__(
            message=f"Docker version {minimum}.0+ is required, but version {version} was found",
            error_type=ErrorType.UNSUPPORTED_VERSION,
        )


class InsufficientDiskSpaceError(TestboxException):
    """The Docker environment does not have enough free disk space."""

    def __init__(self, available_mb: int, required_mb: int):
        self.available_mb = available_mb
        self.required_mb = required_mb
        super().__init__(
            message=(
                f"Not enough disk space in Docker environment "
                f"({available_mb} MB available, {required_mb} MB required)"
            ),
            error_type=ErrorType.INSUFFICIENT_DISK_SPACE,
        )


class DiskSpaceReportError(TestboxException):
    """The `df` report could not be interpreted."""

    fatal = False

    def __init__(self, message: str = "Disk usage report has no root filesystem row"):
        super().__init__(message=message, error_type=ErrorType.DISK_CHECK_INCONCLUSIVE)


class ImagePullTimeoutError(TestboxException):
    """An image pull did not complete in time."""

    fatal = False

    def __init__(self, image: str, timeout: float):
        self.image = image
        self.timeout = timeout
        super().__init__(
            message=f"Pull of image {image} did not complete within {timeout:g}s",
            error_type=ErrorType.IMAGE_PULL_TIMEOUT,
        )


class RuntimeUnreachableError(TestboxException):
    """The Docker daemon did not answer the liveness ping."""

    def __init__(self, endpoint: str, message: Optional[str] = None):
        self.endpoint = endpoint
        super().__init__(
            message=message or f"Docker daemon at {endpoint} is not responding",
            error_type=ErrorType.RUNTIME_UNREACHABLE,
        )


class RuntimeClientError(TestboxException):
    """Wraps any failure raised by the Docker client library."""

    def __init__(self, message: str):
        super().__init__(message=message, error_type=ErrorType.RUNTIME_CLIENT)


class ContainerNotRunningError(TestboxException):
    """A started container did not reach the running state."""

    fatal = False

    def __init__(self, container_id: str, reason: str):
        self.container_id = container_id
        super().__init__(
            message=f"Container {container_id[:12]} is not running: {reason}",
            error_type=ErrorType.CONTAINER_NOT_RUNNING,
        )


class DuplicateMountError(TestboxException):
    """A container path was bound twice."""

    def __init__(self, container_path: str):
        self.container_path = container_path
        super().__init__(
            message=f"Duplicate mount point '{container_path}'",
            error_type=ErrorType.VALIDATION,
        )


class StartupFailedError(TestboxException):
    """Container startup failed after exhausting all attempts."""

    def __init__(self, image: str, attempts: int, cause: Optional[BaseException] = None):
        self.image = image
        self.attempts = attempts
        self.cause = cause
        message = f"Container startup failed for image {image} after {attempts} attempt(s)"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message=message, error_type=ErrorType.STARTUP_FAILED)
