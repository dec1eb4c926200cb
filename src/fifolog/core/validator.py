from __future__ import annotations

"""
Configuration Validation Service.

Acts as the gatekeeper between untrusted configuration input and the engine.
Handles legacy key translation, type coercion and default value injection so
that configuration mistakes degrade into defaults instead of failures.
"""

import dataclasses
import logging
import os
from typing import Any, Dict, List, Mapping, Optional, Tuple

from fifolog.domain.config import read_config_file
from fifolog.domain.models import FifoLoggerConfig
from fifolog.domain.severity import Destination, parse_severity

logger = logging.getLogger(__name__)

# Legacy camelCase option names
LEGACY_KEYS: Dict[str, str] = {
    "logPrefix": "prefix",
    "minLogLevel": "min_level",
    "maxEventLength": "max_event_length",
    "useColor": "use_color",
    "jsonMode": "json_mode",
    "fileName": "file_path",
    "dequeueTimeoutMs": "drain_period_ms",
    "rejuvenateLog": "rotate",
    "rejuvenateSizeMB": "rotate_size_mb",
}

_DESTINATION_ALIASES: Dict[Any, Destination] = {
    "console": Destination.CONSOLE,
    "stdout": Destination.CONSOLE,
    "file": Destination.FILE,
    0: Destination.CONSOLE,
    1: Destination.FILE,
}


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[FifoLoggerConfig, List[str]]:
    """
    Validate and normalize a raw logger configuration.

    Args:
        config: A FifoLoggerConfig, a mapping of options, or None.
        strict: If True, raises exceptions on invalid values instead of coercing.

    Returns:
        Tuple[FifoLoggerConfig, List[str]]: The normalized configuration and
                                            a list of warnings.
    """
    warnings: List[str] = []
    defaults = FifoLoggerConfig()

    if config is None:
        return defaults, warnings

    if isinstance(config, FifoLoggerConfig):
        raw: Dict[str, Any] = {f.name: getattr(config, f.name) for f in dataclasses.fields(config)}
    elif isinstance(config, Mapping):
        raw = _translate_legacy_keys(config, warnings, strict)
    else:
        msg = f"Invalid config type: expected mapping, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.debug(msg)
        return defaults, warnings

    merged: Dict[str, Any] = {}

    merged["prefix"] = _as_str(raw.get("prefix"), defaults.prefix, "prefix", warnings, strict)
    merged["file_path"] = _as_path(raw.get("file_path"), warnings, strict)
    merged["min_level"] = _as_severity(raw.get("min_level"), defaults.min_level, warnings, strict)
    merged["destination"] = _as_destination(raw.get("destination"), defaults.destination, warnings, strict)

    for field in ("use_color", "json_mode", "rotate", "console_fallback"):
        merged[field] = _as_bool(raw.get(field), getattr(defaults, field), field, warnings, strict)

    merged["max_event_length"] = _as_int(
        raw.get("max_event_length"), defaults.max_event_length, "max_event_length",
        warnings, strict, minimum=0
    )
    for field in ("drain_period_ms", "rotation_interval_ms"):
        merged[field] = _as_int(
            raw.get(field), getattr(defaults, field), field, warnings, strict, minimum=1
        )

    merged["rotate_size_mb"] = _as_positive_number(
        raw.get("rotate_size_mb"), defaults.rotate_size_mb, "rotate_size_mb", warnings, strict
    )
    merged["diagnostics_level"] = _as_level_name(
        raw.get("diagnostics_level", defaults.diagnostics_level), warnings, strict
    )

    # Cross-field consistency
    if merged["destination"] is Destination.FILE and not merged["file_path"]:
        msg = "Destination 'file' requires 'file_path'."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Falling back to console.")
        merged["destination"] = Destination.CONSOLE

    if merged["rotate"] and merged["destination"] is not Destination.FILE:
        warnings.append("Option 'rotate' is only honored for file destinations.")

    for w in warnings:
        logger.debug(f"Config: {w}")

    return FifoLoggerConfig(**merged), warnings


def load_config(path: str) -> Tuple[FifoLoggerConfig, List[str]]:
    """
    Read a JSON option file and validate it in non-strict mode.

    Args:
        path: Location of the JSON document.

    Returns:
        Tuple[FifoLoggerConfig, List[str]]: Normalized configuration and warnings.
    """
    return validate_config(read_config_file(path))


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: KEY NORMALIZATION
# -----------------------------------------------------------------------------

def _translate_legacy_keys(
        config: Mapping[str, Any],
        warnings: List[str],
        strict: bool
) -> Dict[str, Any]:
    """Map camelCase option names onto the snake_case schema."""
    known = {f.name for f in dataclasses.fields(FifoLoggerConfig)}
    out: Dict[str, Any] = {}
    for key, value in config.items():
        target = LEGACY_KEYS.get(key, key)
        if target not in known:
            msg = f"Unrecognized option '{key}'."
            if strict:
                raise ValueError(msg)
            warnings.append(f"{msg} Ignored.")
            continue
        out[target] = value
    return out


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        return value

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_path(value: Any, warnings: List[str], strict: bool) -> Optional[str]:
    """Accept strings and path-like objects; empty values mean no file."""
    if value is None:
        return None
    if isinstance(value, (str, os.PathLike)):
        p = os.fspath(value)
        if not isinstance(p, str) or not p.strip():
            return None
        if "\x00" not in p:
            return p

        msg = "Invalid field 'file_path': path contains a NUL byte."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Ignored.")
        return None

    msg = f"Invalid field 'file_path': expected path, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Ignored.")
    return None


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_int(
        value: Any,
        fallback: int,
        field: str,
        warnings: List[str],
        strict: bool,
        *,
        minimum: int
) -> int:
    """Accept integers (and integral strings) not below the given minimum."""
    if value is None:
        return fallback

    candidate: Optional[int] = None
    if isinstance(value, int) and not isinstance(value, bool):
        candidate = int(value)
    elif isinstance(value, str) and not strict:
        try:
            candidate = int(value.strip())
            warnings.append(f"Field '{field}' converted from '{value}' to {candidate}.")
        except ValueError:
            candidate = None

    if candidate is None:
        msg = f"Invalid field '{field}': expected int, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback

    if candidate < minimum:
        msg = f"Invalid field '{field}': {candidate} is below {minimum}."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback

    return candidate


def _as_positive_number(
        value: Any,
        fallback: float,
        field: str,
        warnings: List[str],
        strict: bool
) -> float:
    """Accept positive ints or floats."""
    if value is None:
        return fallback
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
        return value

    msg = f"Invalid field '{field}': expected positive number, received {value!r}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: DOMAIN NORMALIZATION
# -----------------------------------------------------------------------------

def _as_severity(value: Any, fallback: Any, warnings: List[str], strict: bool) -> Any:
    """Resolve the minimum severity, tolerating names and legacy indices."""
    if value is None:
        return fallback
    try:
        return parse_severity(value)
    except ValueError as e:
        if strict:
            raise
        warnings.append(f"Invalid field 'min_level': {e}. Using fallback.")
        return fallback


def _as_destination(value: Any, fallback: Destination, warnings: List[str], strict: bool) -> Destination:
    """Resolve the destination from members, names or the legacy 0/1 codes."""
    if value is None:
        return fallback
    if isinstance(value, Destination):
        return value

    key = value.strip().lower() if isinstance(value, str) else value
    if isinstance(key, (str, int)) and not isinstance(key, bool) and key in _DESTINATION_ALIASES:
        return _DESTINATION_ALIASES[key]

    msg = f"Invalid field 'destination': {value!r} is not console or file."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_level_name(value: Any, warnings: List[str], strict: bool) -> Optional[str]:
    """Normalize the diagnostics level name; None disables the handler."""
    if value is None:
        return None
    if isinstance(value, str):
        name = value.strip().upper()
        if name in ("DEBUG", "INFO", "WARNING", "WARN", "ERROR", "CRITICAL"):
            return "WARNING" if name == "WARN" else name

    msg = f"Invalid field 'diagnostics_level': {value!r}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using fallback.")
    return "WARNING"
