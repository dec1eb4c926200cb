from __future__ import annotations

"""
Event Rendering.

Turns a LogEvent into the single output line written to the destination.
Three layouts are supported (JSON, plain text and ANSI-colored text) and a
truncation rule is applied to the final string. Rendering is pure and never
raises: values that cannot be serialized degrade to their text form.
"""

import json
from datetime import timezone
from typing import Any, Dict

from fifolog.domain.constants import ELLIPSIS
from fifolog.domain.models import LogEvent
from fifolog.domain.severity import Severity

# -----------------------------------------------------------------------------
# ANSI PALETTE
# -----------------------------------------------------------------------------
RESET = "\x1b[0m"
FG_RED = "\x1b[31m"
FG_GREEN = "\x1b[32m"
FG_ORANGE = "\x1b[33m"
FG_YELLOW = "\x1b[38;5;226m"
FG_CYAN = "\x1b[36m"
FG_WHITE = "\x1b[37m"

_SEVERITY_COLORS: Dict[Severity, str] = {
    Severity.DEBUG: FG_CYAN,
    Severity.INFO: "",
    Severity.WARNING: FG_YELLOW,
    Severity.ERROR: FG_RED,
    Severity.CRITICAL: FG_RED,
}


class Formatter:
    """
    Renders events according to the configured layout.

    JSON mode takes precedence over the color flag.
    """

    def __init__(
            self,
            prefix: str = "",
            use_color: bool = True,
            json_mode: bool = False,
            max_event_length: int = 0,
    ) -> None:
        self.prefix = prefix
        self.use_color = use_color
        self.json_mode = json_mode
        self.max_event_length = max_event_length

    def render(self, event: LogEvent) -> str:
        """
        Produce the output line for one event, truncation included.

        Args:
            event: The accepted event.

        Returns:
            str: Rendered line without trailing newline.
        """
        if self.json_mode:
            msg = self._render_json(event)
        elif self.use_color:
            msg = self._render_color(event)
        else:
            msg = self._render_plain(event)
        return truncate(msg, self.max_event_length)

    # -------------------------------------------------------------------------
    # LAYOUTS
    # -------------------------------------------------------------------------

    def _render_json(self, event: LogEvent) -> str:
        payload: Dict[str, Any] = {
            "name": self.prefix,
            "severity": event.level.display_name,
            "date": format_timestamp(event),
            "message": _serializable(event.message),
            "optionalParams": [_serializable(a) for a in event.attachments],
        }
        return to_json(payload)

    def _render_plain(self, event: LogEvent) -> str:
        severity = f"[{event.level.display_name}]"
        date = f"[{format_timestamp(event)}]"
        extra = "[" + "".join(f" {to_json(a)} " for a in event.attachments) + "]"
        return f"{self.prefix} {severity}{date}[{event.message}]{extra}"

    def _render_color(self, event: LogEvent) -> str:
        app_name = RESET + FG_WHITE + self.prefix
        date = f"{FG_GREEN}[{FG_ORANGE}{format_timestamp(event)}{FG_GREEN}]"
        extra = (
            FG_GREEN + "["
            + "".join(f" {FG_YELLOW}{to_json(a)} " for a in event.attachments)
            + FG_GREEN + "]"
        )

        color = _SEVERITY_COLORS.get(event.level, "")
        if color:
            severity = f"{FG_GREEN}[{color}{event.level.display_name}{FG_GREEN}]"
        else:
            severity = f"{FG_GREEN}[{event.level.display_name}]"

        return f"{app_name} {severity}{date}[{event.message}]{extra}"


# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def format_timestamp(event: LogEvent) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and 'Z' suffix."""
    ts = event.timestamp.astimezone(timezone.utc)
    return ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_json(value: Any) -> str:
    """Compact JSON text of a value; non-JSON values fall back to str()."""
    try:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)
    except (TypeError, ValueError):
        # Circular structures
        return json.dumps(repr(value), ensure_ascii=False)


def _serializable(value: Any) -> Any:
    """Keep values json can encode (str fallback included); repr() the rest."""
    try:
        json.dumps(value, default=str)
        return value
    except (TypeError, ValueError):
        return repr(value)


def truncate(msg: str, max_length: int) -> str:
    """Cut lines longer than max_length and mark the cut."""
    if max_length > 0 and len(msg) > max_length:
        return msg[:max_length] + ELLIPSIS
    return msg
