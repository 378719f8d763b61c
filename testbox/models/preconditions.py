"""Precondition check result models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class DiskCheckStatus(str, Enum):
    """Outcome of the disk space check."""

    OK = "ok"
    INSUFFICIENT = "insufficient"
    INCONCLUSIVE = "inconclusive"
    SKIPPED = "skipped"


@dataclass
class DiskSpaceCheck:
    """Result of probing free disk space inside the Docker environment."""

    status: DiskCheckStatus
    available_mb: Optional[int] = None
    used_percent: Optional[int] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        """Whether the check allows execution to proceed."""
        return self.status != DiskCheckStatus.INSUFFICIENT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "available_mb": self.available_mb,
            "used_percent": self.used_percent,
            "detail": self.detail,
        }


@dataclass
class PreconditionResult:
    """Version and disk space checks, computed once per client factory."""

    version_ok: bool
    disk_ok: bool
    docker_version: Optional[str] = None
    disk: Optional[DiskSpaceCheck] = None
    checked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def passed(self) -> bool:
        return self.version_ok and self.disk_ok

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version_ok": self.version_ok,
            "disk_ok": self.disk_ok,
            "docker_version": self.docker_version,
            "disk": self.disk.to_dict() if self.disk else None,
            "checked_at": self.checked_at.isoformat(),
        }
