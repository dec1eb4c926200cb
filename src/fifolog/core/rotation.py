from __future__ import annotations

"""
Size-Triggered Log Rotation.

Periodically probes the live log file and raises a pending-rotation flag
once it reaches the configured ceiling. The rotation itself is performed by
the dispatch loop between two drain passes, so it never races an in-flight
write.
"""

import logging
import threading
from typing import Callable, Optional

from fifolog.core.scheduler import RecurringTask, ScheduledTask, TaskFactory
from fifolog.infra.fs import archive_path_for
from fifolog.infra.writer import DestinationWriter

logger = logging.getLogger(__name__)


class RotationManager:
    """
    Watches one writer's file size on its own recurring task.

    Args:
        writer: Destination whose file is probed and rotated.
        threshold_bytes: Rotation ceiling (size >= threshold triggers).
        interval: Probe period in seconds.
        lock: Lock shared with the dispatch loop; probes never overlap a pass.
        task_factory: Builds the recurring probe task.
        archive_name: Computes the archive name of a path.
    """

    def __init__(
            self,
            writer: DestinationWriter,
            threshold_bytes: int,
            *,
            interval: float = 10.0,
            lock: Optional[threading.RLock] = None,
            task_factory: TaskFactory = RecurringTask,
            archive_name: Callable[[str], str] = archive_path_for,
    ) -> None:
        self.writer = writer
        self.threshold_bytes = threshold_bytes
        self._interval = interval
        self._lock = lock or threading.RLock()
        self._task_factory = task_factory
        self._archive_name = archive_name
        self._pending = threading.Event()
        self._task: Optional[ScheduledTask] = None

    @property
    def pending(self) -> bool:
        return self._pending.is_set()

    @property
    def is_scheduled(self) -> bool:
        return self._task is not None and self._task.is_active

    def start(self) -> None:
        if self._task is not None:
            return
        self._task = self._task_factory(self._interval, self.check, "fifolog-rotation")
        self._task.start()

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def check(self) -> bool:
        """
        Probe the file size and flag a rotation when the ceiling is reached.

        Returns:
            bool: True if a rotation is pending after the probe.
        """
        with self._lock:
            try:
                size = self.writer.size()
            except OSError as e:
                logger.warning(f"Error stat-ing log file '{self.writer.path}'. Error: {e}")
                return self.pending

            if size >= self.threshold_bytes:
                logger.debug(
                    f"Log file '{self.writer.path}' reached {size} bytes; rotation scheduled."
                )
                self._pending.set()
            return self.pending

    def consume_pending(self) -> bool:
        """Clear the pending flag, reporting whether it was set."""
        if self._pending.is_set():
            self._pending.clear()
            return True
        return False

    def rotate(self) -> Optional[str]:
        """
        Archive the current file through the writer.

        Returns:
            Optional[str]: The archive path, or None if the rename did not happen.
        """
        archive = self._archive_name(self.writer.path)
        if self.writer.rotate(archive):
            return archive
        return None
