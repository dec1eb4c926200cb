from __future__ import annotations

"""
Dispatch Loop.

Moves rendered lines from the pending queue to the destination writer on a
recurring task. A pass writes only while the writer accepts more data and
stops at the first backpressure signal; the remaining lines wait for a later
pass. Pending rotations are performed at the end of a pass.

States:
    IDLE      no task scheduled
    WAITING   task scheduled, queue may hold lines
    DRAINING  a pass is running
"""

import logging
import threading
from collections import deque
from typing import Deque, Optional

from fifolog.core.rotation import RotationManager
from fifolog.core.scheduler import RecurringTask, ScheduledTask, TaskFactory
from fifolog.domain.models import DispatchState
from fifolog.infra.writer import DestinationWriter

logger = logging.getLogger(__name__)


class DispatchLoop:
    """
    Periodic drain of a FIFO queue into a DestinationWriter.

    Args:
        queue: Shared pending queue (appended by the engine, popped here only).
        period: Seconds between two passes.
        lock: Lock shared with rotation probes and engine shutdown.
        task_factory: Builds the recurring drain task.
    """

    def __init__(
            self,
            queue: Deque[str],
            *,
            period: float = 0.1,
            lock: Optional[threading.RLock] = None,
            task_factory: TaskFactory = RecurringTask,
    ) -> None:
        self._queue = queue if queue is not None else deque()
        self._period = period
        self._lock = lock or threading.RLock()
        self._task_factory = task_factory
        self._task: Optional[ScheduledTask] = None
        self._state = DispatchState.IDLE
        self._writer: Optional[DestinationWriter] = None
        self._rotation: Optional[RotationManager] = None

    @property
    def state(self) -> DispatchState:
        return self._state

    @property
    def is_scheduled(self) -> bool:
        return self._task is not None and self._task.is_active

    def attach(self, writer: Optional[DestinationWriter], rotation: Optional[RotationManager] = None) -> None:
        self._writer = writer
        self._rotation = rotation

    # -------------------------------------------------------------------------
    # SCHEDULING
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Schedule the recurring pass (IDLE -> WAITING)."""
        if self.is_scheduled:
            return
        if self._task is not None:
            self._task.cancel()
        self._task = self._task_factory(self._period, self.run_once, "fifolog-dispatch")
        self._task.start()
        if self._state is DispatchState.IDLE:
            self._state = DispatchState.WAITING

    def cancel(self) -> None:
        """Stop rescheduling; a pass already running is allowed to finish."""
        if self._task is not None:
            self._task.cancel()
            self._task = None
        if self._state is DispatchState.WAITING:
            self._state = DispatchState.IDLE

    # -------------------------------------------------------------------------
    # PASSES
    # -------------------------------------------------------------------------

    def run_once(self) -> int:
        """
        Execute one drain pass, then any pending rotation.

        Returns:
            int: Number of lines handed to the writer.
        """
        with self._lock:
            self._state = DispatchState.DRAINING
            try:
                written = self._drain()
                if self._rotation is not None and self._rotation.consume_pending():
                    self._rotation.rotate()
            finally:
                self._state = DispatchState.WAITING if self._task is not None else DispatchState.IDLE
            return written

    def flush(self) -> int:
        """
        Write the whole queue ignoring backpressure while the writer is open.

        Returns:
            int: Number of lines handed to the writer.
        """
        with self._lock:
            writer = self._writer
            written = 0
            while writer is not None and writer.is_open and self._queue:
                writer.write(self._queue.popleft())
                written += 1
            return written

    def _drain(self) -> int:
        writer = self._writer
        if writer is None:
            return 0

        written = 0
        while writer.accepts_more and self._queue:
            writer.write(self._queue.popleft())
            written += 1

        writer.pump()
        if written:
            logger.debug(f"Dispatch: {written} lines written, {len(self._queue)} pending.")
        return written
