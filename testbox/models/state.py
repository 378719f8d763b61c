"""Container state snapshot model."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Union

# Docker reports "no timestamp" as the Go zero time rather than null
DOCKER_TIMESTAMP_ZERO = "0001-01-01T00:00:00Z"

Timestamp = Union[str, datetime, int, float, None]


@dataclass(frozen=True)
class ContainerStateSnapshot:
    """Point-in-time read of a container's reported run state.

    Only the fields that every Docker API version reports reliably are kept.
    States such as "created", "OOMKilled" or "dead" are not represented
    directly and have to be inferred from these.
    """

    running: bool = False
    paused: bool = False
    started_at: Timestamp = None
    finished_at: Timestamp = None

    @classmethod
    def from_inspect(cls, attrs: Optional[Dict[str, Any]]) -> "ContainerStateSnapshot":
        """Build a snapshot from container inspect data.

        Accepts either the full inspect payload (``container.attrs``) or
        just its ``State`` block.
        """
        attrs = attrs or {}
        state = attrs.get("State", attrs)
        if not isinstance(state, dict):
            # Some list endpoints report State as a plain status string
            state = {"Running": state == "running", "Paused": state == "paused"}
        return cls(
            running=bool(state.get("Running", False)),
            paused=bool(state.get("Paused", False)),
            started_at=state.get("StartedAt"),
            finished_at=state.get("FinishedAt"),
        )
