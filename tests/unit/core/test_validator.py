from __future__ import annotations

"""
Unit tests for the Configuration Validation Service.

Verifies:
1. Default injection for empty or missing configuration.
2. Legacy camelCase option translation.
3. Type coercion and fallback in non-strict mode.
4. Exceptions in strict mode.
5. JSON option files.
"""

import json
from pathlib import Path

import pytest

from fifolog.core.validator import load_config, validate_config
from fifolog.domain.models import FifoLoggerConfig
from fifolog.domain.severity import Destination, Severity

# -----------------------------------------------------------------------------
# 1. Base Structure & Defaults
# -----------------------------------------------------------------------------

def test_validate_none_returns_defaults() -> None:
    """TC-01: Passing None yields the documented defaults without warnings."""
    cfg, warnings = validate_config(None)

    assert cfg == FifoLoggerConfig()
    assert cfg.min_level is Severity.INFO
    assert cfg.use_color is True
    assert cfg.json_mode is False
    assert cfg.drain_period_ms == 100
    assert cfg.max_event_length == 0
    assert cfg.destination is Destination.CONSOLE
    assert warnings == []


def test_validate_invalid_type_returns_defaults() -> None:
    """TC-01: A non-mapping configuration falls back to defaults with a warning."""
    cfg, warnings = validate_config(["not", "a", "dict"])

    assert cfg == FifoLoggerConfig()
    assert len(warnings) == 1


def test_validate_accepts_config_instance() -> None:
    """TC-01: A FifoLoggerConfig round-trips unchanged."""
    original = FifoLoggerConfig(prefix="svc", min_level=Severity.ERROR, json_mode=True)
    cfg, warnings = validate_config(original)

    assert cfg == original
    assert warnings == []


# -----------------------------------------------------------------------------
# 2. Legacy Keys
# -----------------------------------------------------------------------------

def test_validate_translates_legacy_keys(tmp_path: Path) -> None:
    """TC-02: camelCase options map onto the snake_case schema."""
    raw = {
        "logPrefix": "YourAppName",
        "minLogLevel": 1,
        "maxEventLength": 1024,
        "destination": 1,
        "useColor": False,
        "jsonMode": True,
        "fileName": str(tmp_path / "legacy.log"),
        "dequeueTimeoutMs": 250,
        "rejuvenateLog": True,
        "rejuvenateSizeMB": 5,
    }
    cfg, warnings = validate_config(raw)

    assert warnings == []
    assert cfg.prefix == "YourAppName"
    assert cfg.min_level is Severity.WARNING
    assert cfg.max_event_length == 1024
    assert cfg.destination is Destination.FILE
    assert cfg.use_color is False
    assert cfg.json_mode is True
    assert cfg.drain_period_ms == 250
    assert cfg.rotation_active is True
    assert cfg.rotate_size_bytes == 5 * 1048576


def test_validate_ignores_unknown_options() -> None:
    """TC-02: Unrecognized options are reported and dropped."""
    cfg, warnings = validate_config({"colour": True})

    assert cfg == FifoLoggerConfig()
    assert any("colour" in w for w in warnings)


# -----------------------------------------------------------------------------
# 3. Coercion & Fallbacks
# -----------------------------------------------------------------------------

def test_validate_file_destination_without_path_falls_back_to_console() -> None:
    """TC-03: destination=file requires a path."""
    cfg, warnings = validate_config({"destination": "file"})

    assert cfg.destination is Destination.CONSOLE
    assert cfg.file_backed is False
    assert any("file_path" in w for w in warnings)


def test_validate_nul_in_file_path_falls_back_to_console(tmp_path: Path) -> None:
    """TC-03: A path the OS cannot open is rejected before the writer sees it."""
    cfg, warnings = validate_config({"destination": "file", "file_path": str(tmp_path / "a\x00b.log")})

    assert cfg.file_path is None
    assert cfg.destination is Destination.CONSOLE
    assert any("NUL" in w for w in warnings)

    with pytest.raises(ValueError):
        validate_config({"file_path": "a\x00b.log"}, strict=True)


def test_validate_coerces_strings() -> None:
    """TC-03: CLI-like strings are converted with a warning each."""
    cfg, warnings = validate_config({"json_mode": "yes", "drain_period_ms": "500"})

    assert cfg.json_mode is True
    assert cfg.drain_period_ms == 500
    assert len(warnings) == 2


@pytest.mark.parametrize(
    "raw",
    [
        {"max_event_length": -5},
        {"drain_period_ms": 0},
        {"rotate_size_mb": -1},
        {"min_level": "loud"},
        {"destination": "network"},
        {"use_color": "maybe"},
        {"prefix": 42},
    ],
)
def test_validate_invalid_values_use_defaults(raw: dict) -> None:
    """TC-03: Configuration errors are silently defaulted, never raised."""
    cfg, warnings = validate_config(raw)

    assert cfg == FifoLoggerConfig()
    assert len(warnings) >= 1


def test_validate_rotation_requires_file_destination() -> None:
    """TC-03: Rotation is only honored for file destinations."""
    cfg, warnings = validate_config({"rotate": True})

    assert cfg.rotate is True
    assert cfg.rotation_active is False
    assert any("rotate" in w for w in warnings)


# -----------------------------------------------------------------------------
# 4. Strict Mode
# -----------------------------------------------------------------------------

def test_validate_strict_raises_type_error() -> None:
    """TC-04: Strict mode surfaces type mismatches."""
    with pytest.raises(TypeError):
        validate_config({"json_mode": "yes"}, strict=True)


def test_validate_strict_raises_value_error() -> None:
    """TC-04: Strict mode surfaces out-of-range values."""
    with pytest.raises(ValueError):
        validate_config({"destination": "file"}, strict=True)


# -----------------------------------------------------------------------------
# 5. Option Files
# -----------------------------------------------------------------------------

def test_load_config_reads_json(tmp_path: Path) -> None:
    """TC-05: JSON option files are validated like mappings."""
    path = tmp_path / "fifolog.json"
    path.write_text(json.dumps({"prefix": "fromfile", "minLogLevel": "error"}), encoding="utf-8")

    cfg, warnings = load_config(str(path))

    assert cfg.prefix == "fromfile"
    assert cfg.min_level is Severity.ERROR
    assert warnings == []


def test_load_config_corrupted_file_returns_defaults(tmp_path: Path) -> None:
    """TC-05: Missing or corrupted files degrade to defaults."""
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")

    assert load_config(str(broken))[0] == FifoLoggerConfig()
    assert load_config(str(tmp_path / "missing.json"))[0] == FifoLoggerConfig()
