from __future__ import annotations

"""
Engine Domain Data Models.

Defines the immutable event and configuration structures exchanged between
the engine, the formatter and the destination writer, together with the
explicit state enumerations of each stateful component.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Tuple

from fifolog.domain.constants import (
    DEFAULT_DRAIN_PERIOD_MS,
    DEFAULT_ROTATE_SIZE_MB,
    ONE_MB_BYTES,
    ROTATION_CHECK_INTERVAL_MS,
)
from fifolog.domain.severity import Destination, Severity

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class LogEvent:
    """
    A single accepted log call.

    Attributes:
        level: Resolved severity of the call.
        message: Primary message text.
        attachments: Extra values rendered as serialized context.
        timestamp: Creation instant (timezone-aware, UTC).
    """
    level: Severity
    message: Any
    attachments: Tuple[Any, ...] = ()
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class FifoLoggerConfig:
    """
    Immutable settings of one engine lifetime.

    Attributes:
        prefix: Name rendered in front of every line (JSON 'name').
        min_level: Events below this severity are dropped.
        max_event_length: Truncation length of a rendered line (0 = unlimited).
        destination: Console or file delivery.
        use_color: ANSI colors for non-JSON rendering.
        json_mode: Render each event as a JSON object.
        file_path: Target file; required when destination is FILE.
        drain_period_ms: Period of the dispatch loop.
        rotate: Enable size-triggered rotation.
        rotate_size_mb: Rotation ceiling in megabytes.
        rotation_interval_ms: Period of the rotation size probe.
        console_fallback: Route events to the console once file logging is disabled.
        diagnostics_level: Level of the stderr diagnostics handler (None = untouched).
    """
    prefix: str = ""
    min_level: Severity = Severity.INFO
    max_event_length: int = 0
    destination: Destination = Destination.CONSOLE
    use_color: bool = True
    json_mode: bool = False
    file_path: Optional[str] = None
    drain_period_ms: int = DEFAULT_DRAIN_PERIOD_MS
    rotate: bool = False
    rotate_size_mb: float = DEFAULT_ROTATE_SIZE_MB
    rotation_interval_ms: int = ROTATION_CHECK_INTERVAL_MS
    console_fallback: bool = False
    diagnostics_level: Optional[str] = "WARNING"

    @property
    def file_backed(self) -> bool:
        return self.destination is Destination.FILE and bool(self.file_path)

    @property
    def rotation_active(self) -> bool:
        return self.rotate and self.file_backed and self.rotate_size_mb > 0

    @property
    def rotate_size_bytes(self) -> int:
        return int(self.rotate_size_mb * ONE_MB_BYTES)


# -----------------------------------------------------------------------------
# STATE ENUMERATIONS
# -----------------------------------------------------------------------------

class WriterState(Enum):
    """Lifecycle of the destination writer stream."""

    CLOSED = "closed"
    WRITABLE = "writable"
    BLOCKED = "blocked"
    RETRYING = "retrying"
    DISABLED = "disabled"


class DispatchState(Enum):
    """Lifecycle of the periodic drain loop."""

    IDLE = "idle"
    WAITING = "waiting"
    DRAINING = "draining"


class EngineState(Enum):
    """Lifecycle of a logger engine."""

    NEW = "new"
    RUNNING = "running"
    DRAINING = "draining"
    CLOSED = "closed"
