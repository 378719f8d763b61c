"""Data models for testbox."""

from .endpoint import EndpointConfig, EndpointScheme
from .state import ContainerStateSnapshot, DOCKER_TIMESTAMP_ZERO
from .preconditions import DiskCheckStatus, DiskSpaceCheck, PreconditionResult
from .errors import (
    ErrorType,
    ErrorDetail,
    ErrorResponse,
    TestboxException,
    StrategyUnavailable,
    NoValidConfigurationError,
    UnsupportedRuntimeVersionError,
    InsufficientDiskSpaceError,
    DiskSpaceReportError,
    ImagePullTimeoutError,
    RuntimeUnreachableError,
    RuntimeClientError,
    ContainerNotRunningError,
    DuplicateMountError,
    StartupFailedError,
)

__all__ = [
    # Endpoint models
    "EndpointConfig",
    "EndpointScheme",
    # Container state
    "ContainerStateSnapshot",
    "DOCKER_TIMESTAMP_ZERO",
    # Preconditions
    "DiskCheckStatus",
    "DiskSpaceCheck",
    "PreconditionResult",
    # Error models
    "ErrorType",
    "ErrorDetail",
    "ErrorResponse",
    "TestboxException",
    "StrategyUnavailable",
    "NoValidConfigurationError",
    "UnsupportedRuntimeVersionError",
    "InsufficientDiskSpaceError",
    "DiskSpaceReportError",
    "ImagePullTimeoutError",
    "RuntimeUnreachableError",
    "RuntimeClientError",
    "ContainerNotRunningError",
    "DuplicateMountError",
    "StartupFailedError",
]
