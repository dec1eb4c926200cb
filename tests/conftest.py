from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Manual doubles for recurring tasks, retry timers and streams so that
   engine timing can be driven deterministically from the tests.
"""

import os
import sys
from typing import Any, Callable, Dict, Generator, List, Optional

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from fifolog.infra.diagnostics import reset_diagnostics  # noqa: E402


# -----------------------------------------------------------------------------
# Test Doubles
# -----------------------------------------------------------------------------
class ManualTask:
    """Recurring task that only fires when the test says so."""

    def __init__(self, interval: float, callback: Callable[[], None], name: str) -> None:
        self.interval = interval
        self.callback = callback
        self.name = name
        self.started = False
        self.cancelled = False

    @property
    def is_active(self) -> bool:
        return self.started and not self.cancelled

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.callback()


class ManualTaskFactory:
    """Records every task built, indexed by name (latest wins)."""

    def __init__(self) -> None:
        self.tasks: List[ManualTask] = []

    def __call__(self, interval: float, callback: Callable[[], None], name: str) -> ManualTask:
        task = ManualTask(interval, callback, name)
        self.tasks.append(task)
        return task

    def latest(self, name: str) -> ManualTask:
        return [t for t in self.tasks if t.name == name][-1]


class ManualTimer:
    """threading.Timer replacement fired explicitly by the test."""

    def __init__(self, delay: float, function: Callable[[], None]) -> None:
        self.delay = delay
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.function()


class ManualTimerFactory:
    def __init__(self) -> None:
        self.timers: List[ManualTimer] = []

    def __call__(self, delay: float, function: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(delay, function)
        self.timers.append(timer)
        return timer

    @property
    def delays(self) -> List[float]:
        return [t.delay for t in self.timers]


class FakeStream:
    """In-memory stream with a line-count high-water mark and injectable failures."""

    def __init__(self, path: str, high_water_mark: int = 3) -> None:
        self.path = path
        self.high_water_mark = high_water_mark
        self.flushed: List[str] = []
        self.pending: List[str] = []
        self.closed = False
        self.fail_write = False
        self.fail_flush = False

    def write(self, data: str) -> bool:
        if self.fail_write:
            raise OSError("write failed")
        self.pending.append(data)
        return len(self.pending) < self.high_water_mark

    def flush(self) -> None:
        if self.fail_flush:
            raise OSError("disk full")
        self.flushed.extend(self.pending)
        self.pending.clear()

    def close(self) -> None:
        self.flush()
        self.closed = True

    def take_pending(self) -> List[str]:
        pending, self.pending = self.pending, []
        return pending


class FakeOpener:
    """Stream opener that can fail a given number of times before succeeding."""

    def __init__(self, high_water_mark: int = 3) -> None:
        self.high_water_mark = high_water_mark
        self.streams: List[FakeStream] = []
        self.failures_left = 0

    def __call__(self, path: str) -> FakeStream:
        if self.failures_left > 0:
            self.failures_left -= 1
            raise OSError("open failed")
        stream = FakeStream(path, self.high_water_mark)
        self.streams.append(stream)
        return stream

    @property
    def current(self) -> Optional[FakeStream]:
        return self.streams[-1] if self.streams else None

    @property
    def all_lines(self) -> List[str]:
        return [line for s in self.streams for line in s.flushed]


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def task_factory() -> ManualTaskFactory:
    return ManualTaskFactory()


@pytest.fixture
def timer_factory() -> ManualTimerFactory:
    return ManualTimerFactory()


@pytest.fixture
def opener() -> FakeOpener:
    return FakeOpener()


@pytest.fixture
def file_config_dict(tmp_path: Any) -> Dict[str, Any]:
    """
    Return a complete file-backed configuration dictionary.

    Returns:
        Dict[str, Any]: Options pointing to a temporary log file.
    """
    return {
        "prefix": "TestApp",
        "min_level": "DEBUG",
        "destination": "file",
        "file_path": str(tmp_path / "app.log"),
        "use_color": False,
        "json_mode": False,
        "max_event_length": 0,
        "drain_period_ms": 100,
        "diagnostics_level": None,
    }


@pytest.fixture(autouse=True)
def reset_diagnostics_handlers() -> Generator[None, None, None]:
    """Detach diagnostics handlers installed by engines under test."""
    yield
    reset_diagnostics()
