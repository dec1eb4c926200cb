from __future__ import annotations

"""
Destination Writer.

Owns the single open stream of a file-backed engine. Exposes writes with a
backpressure signal, a drain operation that clears backpressure, size-based
rotation and a close operation that resolves a Future once the stream is
released. I/O failures go through a bounded retry protocol with linear
backoff; after the last failed attempt file logging is disabled.
"""

import logging
import os
import threading
from concurrent.futures import Future
from typing import Any, Callable, List, Optional

from fifolog.domain.constants import MAX_STREAM_ERROR_RETRIES, STREAM_ERROR_RETRY_DELAY_MS
from fifolog.domain.models import WriterState
from fifolog.infra.fs import ensure_parent_dir, file_size
from fifolog.infra.stream import FileStream, Stream

logger = logging.getLogger(__name__)

StreamOpener = Callable[[str], Stream]
TimerFactory = Callable[[float, Callable[[], None]], Any]


class DestinationWriter:
    """
    Stateful owner of one append-mode destination stream.

    State transitions:
        CLOSED -> WRITABLE          open() succeeded
        WRITABLE <-> BLOCKED        backpressure raised / drained by pump()
        any open -> RETRYING        I/O error, reopen scheduled
        RETRYING -> WRITABLE        reopen succeeded (attempt counter reset)
        RETRYING -> DISABLED        retries exhausted
        any -> CLOSED               close()
    """

    def __init__(
            self,
            path: str,
            *,
            opener: StreamOpener = FileStream,
            timer_factory: TimerFactory = threading.Timer,
            max_retries: int = MAX_STREAM_ERROR_RETRIES,
            retry_delay_ms: int = STREAM_ERROR_RETRY_DELAY_MS,
            on_disabled: Optional[Callable[[], None]] = None,
    ) -> None:
        self.path = path
        self._opener = opener
        self._timer_factory = timer_factory
        self._max_retries = max_retries
        self._retry_delay_ms = retry_delay_ms
        self._on_disabled = on_disabled

        self._lock = threading.RLock()
        self._stream: Optional[Stream] = None
        self._state = WriterState.CLOSED
        self._attempts = 0
        self._retry_timer: Optional[Any] = None
        self._carry: List[str] = []

    # -------------------------------------------------------------------------
    # STATE INSPECTION
    # -------------------------------------------------------------------------

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def accepts_more(self) -> bool:
        return self._state is WriterState.WRITABLE

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    @property
    def attempt_count(self) -> int:
        return self._attempts

    @property
    def carried(self) -> int:
        """Number of chunks held back for the next successful reopen."""
        return len(self._carry)

    def size(self) -> int:
        """
        Probe the current on-disk size of the destination.

        Raises:
            OSError: If the file cannot be stat-ed.
        """
        return file_size(self.path)

    # -------------------------------------------------------------------------
    # STREAM OPERATIONS
    # -------------------------------------------------------------------------

    def open(self) -> bool:
        """
        Open the destination stream.

        Returns:
            bool: True if the stream is open and writable.
        """
        with self._lock:
            if self._state is WriterState.DISABLED:
                return False
            if self._stream is not None:
                return True
            return self._open_stream()

    def write(self, line: str) -> bool:
        """
        Hand one rendered line to the stream.

        Lines written while a reopen is pending are carried over to the next
        stream; lines written to a disabled or closed writer are dropped.

        Args:
            line: Rendered event without trailing newline.

        Returns:
            bool: True if the writer accepts more data.
        """
        data = line + "\n"
        with self._lock:
            if self._stream is None:
                if self._state is WriterState.RETRYING:
                    self._carry.append(data)
                return False

            try:
                ok = self._stream.write(data)
            except OSError as e:
                self._handle_error(e, failed=data)
                return False

            if not ok and self._state is WriterState.WRITABLE:
                self._state = WriterState.BLOCKED
            return self.accepts_more

    def pump(self) -> None:
        """Push buffered data to the operating system; success clears backpressure."""
        with self._lock:
            if self._stream is None:
                return
            try:
                self._stream.flush()
            except OSError as e:
                self._handle_error(e)
                return
            if self._state is WriterState.BLOCKED:
                self._state = WriterState.WRITABLE

    def reopen_now(self) -> bool:
        """
        Attempt an immediate reopen instead of waiting for the retry timer.

        Returns:
            bool: True if the stream is open afterwards.
        """
        with self._lock:
            if self._stream is not None:
                return True
            if self._state is not WriterState.RETRYING:
                return False
            self._cancel_retry()
            if self._open_stream():
                self._attempts = 0
                return True
            return False

    def rotate(self, archive_path: str) -> bool:
        """
        Archive the current file and continue on a fresh one.

        Args:
            archive_path: New name of the current file.

        Returns:
            bool: True if the file was renamed to the archive.
        """
        with self._lock:
            if self._stream is None:
                logger.warning(f"Rotation of '{self.path}' skipped: stream is not open.")
                return False

            self._state = WriterState.BLOCKED
            try:
                self._stream.close()
            except OSError as e:
                self._handle_error(e)
                return False
            self._stream = None

            renamed = True
            try:
                os.rename(self.path, archive_path)
                logger.info(f"Log file '{self.path}' archived as '{archive_path}'.")
            except OSError as e:
                logger.error(f"Error renaming '{self.path}' to '{archive_path}'. Error: {e}")
                renamed = False

            self._attempts = 0
            self._open_stream()
            return renamed

    def close(self) -> "Future[None]":
        """
        Flush and release the stream.

        Close failures are reported on the diagnostics channel; the returned
        Future always completes.

        Returns:
            Future[None]: Resolved once the stream has been released.
        """
        future: "Future[None]" = Future()
        with self._lock:
            self._cancel_retry()
            stream, self._stream = self._stream, None
            if stream is not None:
                try:
                    stream.close()
                except OSError as e:
                    logger.error(f"Error closing log file '{self.path}'. Error: {e}")

            if self._carry:
                logger.warning(
                    f"{len(self._carry)} buffered entries could not be written to '{self.path}'."
                )
                self._carry.clear()

            self._state = WriterState.CLOSED
            self._attempts = 0
        future.set_result(None)
        return future

    # -------------------------------------------------------------------------
    # ERROR PROTOCOL
    # -------------------------------------------------------------------------

    def _open_stream(self) -> bool:
        """Open a stream at the original path and replay carried data."""
        try:
            ensure_parent_dir(self.path)
            self._stream = self._opener(self.path)
        except (OSError, ValueError) as e:
            # ValueError: paths the OS cannot represent (embedded NUL)
            self._stream = None
            self._handle_error(e)
            return False

        self._state = WriterState.WRITABLE
        carry, self._carry = self._carry, []
        for i, data in enumerate(carry):
            try:
                ok = self._stream.write(data)
            except OSError as e:
                self._handle_error(e, failed=data)
                if self._state is WriterState.RETRYING:
                    self._carry.extend(carry[i + 1:])
                return False
            if not ok:
                self._state = WriterState.BLOCKED
        return True

    def _handle_error(self, error: Exception, failed: Optional[str] = None) -> None:
        """Release the broken stream and schedule a reopen or disable the writer."""
        logger.error(f"Error writing to file '{self.path}'. Error: {error}")

        stream, self._stream = self._stream, None
        if stream is not None:
            self._carry.extend(stream.take_pending())
            try:
                stream.close()
            except OSError as close_error:
                logger.error(f"Error closing stream after write error: {close_error}")
        if failed is not None:
            self._carry.append(failed)

        if self._attempts < self._max_retries:
            self._attempts += 1
            self._state = WriterState.RETRYING
            delay_ms = self._retry_delay_ms * self._attempts
            logger.warning(
                f"Reopening '{self.path}' in {delay_ms} ms "
                f"(attempt {self._attempts}/{self._max_retries})."
            )
            self._schedule_retry(delay_ms / 1000.0)
        else:
            self._state = WriterState.DISABLED
            dropped = len(self._carry)
            self._carry.clear()
            logger.error(
                f"Max retries reached for opening log file '{self.path}'. "
                f"File logging disabled ({dropped} buffered entries dropped)."
            )
            if self._on_disabled is not None:
                self._on_disabled()

    def _schedule_retry(self, delay: float) -> None:
        self._cancel_retry()
        timer = self._timer_factory(delay, self._retry_open)
        timer.daemon = True
        self._retry_timer = timer
        timer.start()

    def _cancel_retry(self) -> None:
        if self._retry_timer is not None:
            self._retry_timer.cancel()
            self._retry_timer = None

    def _retry_open(self) -> None:
        with self._lock:
            self._retry_timer = None
            if self._state is not WriterState.RETRYING:
                return
            if self._open_stream():
                logger.info(f"Log file stream '{self.path}' re-opened successfully.")
                self._attempts = 0
