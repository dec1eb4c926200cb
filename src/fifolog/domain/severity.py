from __future__ import annotations

"""
Severity and Destination Enumerations.

Severities reuse the numeric constants of the standard 'logging' module so
that engine filtering and host logging configuration speak the same scale.
"""

import logging
from enum import Enum, IntEnum
from typing import Any, Dict


class Severity(IntEnum):
    """Totally ordered log level."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @property
    def display_name(self) -> str:
        """Fixed lower-case name used in every rendered line."""
        return self.name.lower()


class Destination(Enum):
    """Where rendered events are delivered."""

    CONSOLE = "console"
    FILE = "file"


class DrainPeriod(IntEnum):
    """Preset drain periods in milliseconds."""

    FAST = 100
    STANDARD = 250
    MEDIUM = 500
    SLOW = 1000


# Mapping of string identifiers to severities
_LEVEL_MAP: Dict[str, Severity] = {
    "DEBUG": Severity.DEBUG,
    "INFO": Severity.INFO,
    "WARNING": Severity.WARNING,
    "WARN": Severity.WARNING,
    "ERROR": Severity.ERROR,
    "CRITICAL": Severity.CRITICAL,
}

# Positional indices of the legacy numeric scale (-1 .. 3)
_LEGACY_INDEX: Dict[int, Severity] = {
    -1: Severity.DEBUG,
    0: Severity.INFO,
    1: Severity.WARNING,
    2: Severity.ERROR,
    3: Severity.CRITICAL,
}


def parse_severity(value: Any) -> Severity:
    """
    Convert a severity-like value into a Severity.

    Accepts members, 'logging' numeric levels, the legacy -1..3 scale and
    level names.

    Args:
        value: Raw severity representation.

    Returns:
        Severity: The matching member.

    Raises:
        ValueError: If the value does not designate a known severity.
    """
    if isinstance(value, Severity):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Unknown severity: {value!r}")
    if isinstance(value, int):
        if value in _LEGACY_INDEX:
            return _LEGACY_INDEX[value]
        return Severity(value)
    if isinstance(value, str):
        key = value.strip().upper()
        if key in _LEVEL_MAP:
            return _LEVEL_MAP[key]
    raise ValueError(f"Unknown severity: {value!r}")


def resolve_severity(value: Any) -> Severity:
    """Lenient variant of parse_severity; unknown values resolve to INFO."""
    try:
        return parse_severity(value)
    except ValueError:
        return Severity.INFO
