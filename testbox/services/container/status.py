"""Container status classification.

Docker inspect only gives us ``Running``, ``Paused``, ``StartedAt`` and
``FinishedAt`` reliably, and it never uses null for timestamps: an unset
timestamp comes back as the Go zero time (``0001-01-01T00:00:00Z``).
The helpers here are pure functions and safe to call from any thread.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from ...models.state import ContainerStateSnapshot, Timestamp

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_RFC3339_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<tz>Z|[+-]\d{2}:?\d{2})?$",
    re.IGNORECASE,
)


def parse_docker_timestamp(value: Timestamp) -> Optional[datetime]:
    """Parse a Docker timestamp into a timezone-aware datetime.

    Args:
        value: RFC 3339 string (nanosecond precision allowed), epoch seconds,
            datetime, or None

    Returns:
        Parsed datetime (naive inputs are taken as UTC), or None for None and
        blank strings

    Raises:
        ValueError: If a string is not an RFC 3339 timestamp
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return EPOCH + timedelta(seconds=value)

    text = str(value).strip()
    if not text:
        return None

    match = _RFC3339_RE.match(text)
    if not match:
        raise ValueError(f"Invalid Docker timestamp: {value!r}")

    # Python only keeps microseconds
    fraction = (match.group("fraction") or "")[:6].ljust(6, "0")
    tz = match.group("tz")
    if tz is None or tz.upper() == "Z":
        tz = "+00:00"
    elif ":" not in tz:
        tz = f"{tz[:3]}:{tz[3:]}"

    base = match.group("base").replace(" ", "T")
    return datetime.fromisoformat(f"{base}.{fraction}{tz}")


def is_docker_timestamp_empty(value: Timestamp) -> bool:
    """Whether a Docker timestamp means "no value".

    None, blank strings, the Go zero time (in any encoding) and the zero
    epoch are all treated as empty. Current Docker versions use the zero
    time, but older clients decode it to epoch 0.
    """
    if value is None:
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0
    try:
        parsed = parse_docker_timestamp(value)
    except ValueError:
        return False
    if parsed is None:
        return True
    return parsed.year == 1 or parsed == EPOCH


def is_container_running(
    state: ContainerStateSnapshot,
    minimum_running_duration: Optional[Union[timedelta, float]] = None,
    now: Optional[datetime] = None,
) -> bool:
    """Is the container running, and has it been for long enough?

    Args:
        state: Snapshot from container inspect
        minimum_running_duration: How long the container must have been
            running to count as "solidly" running; None for no bound
        now: Time to treat as the current time (defaults to now, UTC)

    Returns:
        True if we can conclude that the container is running
    """
    if not state.running:
        return False
    if minimum_running_duration is None:
        return True

    if not isinstance(minimum_running_duration, timedelta):
        minimum_running_duration = timedelta(seconds=minimum_running_duration)

    if is_docker_timestamp_empty(state.started_at):
        return False
    started_at = parse_docker_timestamp(state.started_at)

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    return started_at <= now - minimum_running_duration


def is_container_stopped(state: ContainerStateSnapshot) -> bool:
    """Has the container started and then halted?

    A container that never started is neither running nor stopped.
    """
    if state.running or state.paused:
        return False

    # Both timestamps set means the container started and finished
    return not is_docker_timestamp_empty(state.started_at) and not is_docker_timestamp_empty(
        state.finished_at
    )
