from __future__ import annotations

"""
Recurring Background Tasks.

Provides the cancellable periodic task used by the dispatch loop and the
rotation manager. Each task runs on its own daemon thread and sleeps on a
threading.Event so that cancellation takes effect without waiting for the
full period. Cancellation never interrupts a pass that is already running.
"""

import logging
import threading
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class ScheduledTask(Protocol):
    """Handle of a periodically invoked callback."""

    def start(self) -> None: ...

    def cancel(self) -> None: ...

    @property
    def is_active(self) -> bool: ...


TaskFactory = Callable[[float, Callable[[], None], str], ScheduledTask]


class RecurringTask:
    """
    Invokes a callback every `interval` seconds until cancelled.

    The next firing is armed only after the previous callback has returned,
    so firings of the same task never overlap.
    """

    def __init__(self, interval: float, callback: Callable[[], None], name: str = "fifolog-task") -> None:
        self._interval = interval
        self._callback = callback
        self._name = name
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_active(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and not self._stopped.is_set()
        )

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()

    def cancel(self) -> None:
        self._stopped.set()

    def _run(self) -> None:
        while not self._stopped.wait(self._interval):
            try:
                self._callback()
            except Exception:
                # The task must survive any failure of a single pass
                logger.exception(f"{self._name}: Unexpected failure during scheduled pass.")
