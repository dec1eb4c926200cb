from __future__ import annotations

"""
Logger Engine.

Orchestrates the lifecycle of one queued logger: configuration, the pending
queue, the destination writer, the dispatch loop and the rotation manager.
Callers only ever talk to FifoLogger; log() renders and enqueues without
blocking, close() flushes everything accepted so far and resolves a Future
once the destination has been released.

Lifecycle:
    NEW -> RUNNING       init()
    RUNNING -> DRAINING  close() requested, final flush in progress
    DRAINING -> CLOSED   destination released; init() may be called again
"""

import atexit
import dataclasses
import logging
import sys
import threading
from collections import deque
from concurrent.futures import Future
from typing import Any, Callable, Deque, Optional, TextIO

from fifolog.core.dispatch import DispatchLoop
from fifolog.core.formatting import Formatter
from fifolog.core.rotation import RotationManager
from fifolog.core.scheduler import RecurringTask, TaskFactory
from fifolog.core.validator import validate_config
from fifolog.domain.models import EngineState, FifoLoggerConfig, LogEvent, WriterState
from fifolog.domain.severity import Severity, resolve_severity
from fifolog.infra.diagnostics import configure_diagnostics
from fifolog.infra.writer import DestinationWriter

logger = logging.getLogger(__name__)

WriterFactory = Callable[..., DestinationWriter]


class FifoLogger:
    """
    Queued, non-blocking log writer.

    Args:
        config: Optional configuration; when given, init() is called at once.
        console: Console stream (defaults to sys.stdout resolved at emit time).
        writer_factory: Builds the DestinationWriter for file destinations.
        task_factory: Builds the recurring drain and rotation tasks.
    """

    def __init__(
            self,
            config: Any = None,
            *,
            console: Optional[TextIO] = None,
            writer_factory: WriterFactory = DestinationWriter,
            task_factory: TaskFactory = RecurringTask,
    ) -> None:
        self._console = console
        self._writer_factory = writer_factory
        self._task_factory = task_factory

        self._lock = threading.RLock()
        self._accept_lock = threading.Lock()
        self._console_lock = threading.Lock()

        self._cfg = FifoLoggerConfig()
        self._formatter = Formatter()
        self._queue: Deque[str] = deque()
        self._state = EngineState.NEW
        self._file_path: Optional[str] = None
        self._file_disabled = False
        self._writer: Optional[DestinationWriter] = None
        self._rotation: Optional[RotationManager] = None
        self._dispatch = DispatchLoop(self._queue, lock=self._lock, task_factory=task_factory)
        self._atexit_registered = False
        self._closing: Optional["Future[None]"] = None

        if config is not None:
            self.init(config)

    # -------------------------------------------------------------------------
    # INTROSPECTION
    # -------------------------------------------------------------------------

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def config(self) -> FifoLoggerConfig:
        return self._cfg

    @property
    def pending(self) -> int:
        """Number of rendered lines waiting for the dispatch loop."""
        return len(self._queue)

    @property
    def writer(self) -> Optional[DestinationWriter]:
        return self._writer

    @property
    def dispatch(self) -> DispatchLoop:
        return self._dispatch

    @property
    def rotation(self) -> Optional[RotationManager]:
        return self._rotation

    @property
    def file_backed(self) -> bool:
        return bool(self._file_path) and self._writer is not None

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------

    def init(self, config: Any = None, **overrides: Any) -> "FifoLogger":
        """
        Apply a configuration and start the background machinery.

        A call on a running engine is a no-op.

        Args:
            config: FifoLoggerConfig, mapping of options, or None for defaults.
            **overrides: Individual options applied on top of `config`.

        Returns:
            FifoLogger: The engine itself.
        """
        with self._lock:
            if self._state in (EngineState.RUNNING, EngineState.DRAINING):
                return self

            if overrides:
                current, _ = validate_config(config)
                merged = {f.name: getattr(current, f.name) for f in dataclasses.fields(current)}
                merged.update(overrides)
                config = merged

            cfg, _warnings = validate_config(config)
            self._cfg = cfg
            self._formatter = Formatter(
                prefix=cfg.prefix,
                use_color=cfg.use_color,
                json_mode=cfg.json_mode,
                max_event_length=cfg.max_event_length,
            )
            self._queue.clear()
            self._file_disabled = False
            self._file_path = None
            self._writer = None
            self._rotation = None
            self._closing = None

            if cfg.diagnostics_level is not None:
                configure_diagnostics(cfg.diagnostics_level)

            if cfg.file_backed:
                self._file_path = cfg.file_path
                self._writer = self._writer_factory(cfg.file_path, on_disabled=self._on_file_disabled)
                self._writer.open()

                if cfg.rotation_active:
                    self._rotation = RotationManager(
                        self._writer,
                        cfg.rotate_size_bytes,
                        interval=cfg.rotation_interval_ms / 1000.0,
                        lock=self._lock,
                        task_factory=self._task_factory,
                    )

                self._dispatch = DispatchLoop(
                    self._queue,
                    period=cfg.drain_period_ms / 1000.0,
                    lock=self._lock,
                    task_factory=self._task_factory,
                )
                self._dispatch.attach(self._writer, self._rotation)
                self._dispatch.start()
                if self._rotation is not None:
                    self._rotation.start()
                self._register_atexit()

            self._state = EngineState.RUNNING
            logger.debug(
                f"Engine initialized (destination={cfg.destination.value}, "
                f"file={self._file_path or '-'}, rotation={cfg.rotation_active})."
            )
            return self

    def close(self, on_complete: Optional[Callable[[], None]] = None) -> "Future[None]":
        """
        Flush every accepted event and release the destination.

        May block on I/O. No event is accepted once close has been requested.

        Args:
            on_complete: Invoked with no arguments once shutdown completes.

        Returns:
            Future[None]: Resolved when the destination has been released.
        """
        with self._accept_lock:
            if self._state is EngineState.DRAINING and self._closing is not None:
                return self._with_callback(self._closing, on_complete)
            self._state = EngineState.DRAINING
            closing: "Future[None]" = Future()
            self._closing = closing

        self._dispatch.cancel()
        if self._rotation is not None:
            self._rotation.cancel()

        with self._lock:
            writer = self._writer
            if writer is not None:
                if writer.state is WriterState.RETRYING:
                    writer.reopen_now()
                self._dispatch.flush()

                if self._queue:
                    logger.warning(
                        f"{len(self._queue)} events could not be written to '{writer.path}' before close."
                    )
                writer.close().result()

            self._reset()
        closing.set_result(None)
        return self._with_callback(closing, on_complete)

    def __enter__(self) -> "FifoLogger":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close().result()

    # -------------------------------------------------------------------------
    # CALL SURFACE
    # -------------------------------------------------------------------------

    def log(self, level: Any, message: Any, *attachments: Any) -> None:
        """
        Accept one event. Never raises and never blocks on I/O.

        Args:
            level: Severity (unknown values are treated as INFO).
            message: Primary message.
            *attachments: Extra values rendered as serialized context.
        """
        if self._state in (EngineState.DRAINING, EngineState.CLOSED):
            return

        if self.file_backed and not self._dispatch.is_scheduled:
            # Self-healing reschedule; the drain task is not expected to vanish
            with self._accept_lock:
                if self._state is EngineState.RUNNING and not self._dispatch.is_scheduled:
                    logger.warning("Dispatch task was not scheduled; rescheduling.")
                    self._dispatch.start()

        severity = resolve_severity(level)
        if severity < self._cfg.min_level:
            return

        try:
            line = self._formatter.render(LogEvent(severity, message, tuple(attachments)))
        except Exception as e:
            # A message object whose __str__ fails must not reach the caller
            logger.error(f"Failed to render log event: {e}")
            return

        if self.file_backed:
            with self._accept_lock:
                if self._state in (EngineState.DRAINING, EngineState.CLOSED):
                    return
                self._queue.append(line)
        elif self._file_disabled and not self._cfg.console_fallback:
            return
        else:
            self._emit_console(line)

    def debug(self, message: Any, *attachments: Any) -> None:
        self.log(Severity.DEBUG, message, *attachments)

    def info(self, message: Any, *attachments: Any) -> None:
        self.log(Severity.INFO, message, *attachments)

    def warn(self, message: Any, *attachments: Any) -> None:
        self.log(Severity.WARNING, message, *attachments)

    warning = warn

    def error(self, message: Any, *attachments: Any) -> None:
        self.log(Severity.ERROR, message, *attachments)

    def critical(self, message: Any, *attachments: Any) -> None:
        self.log(Severity.CRITICAL, message, *attachments)

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS
    # -------------------------------------------------------------------------

    def _emit_console(self, line: str) -> None:
        stream = self._console or sys.stdout
        try:
            with self._console_lock:
                stream.write(line + "\n")
                stream.flush()
        except (OSError, ValueError) as e:
            logger.warning(f"Console write failed: {e}")

    def _on_file_disabled(self) -> None:
        """Writer callback: file logging is off for the rest of this engine lifetime."""
        self._file_path = None
        self._file_disabled = True
        dropped = len(self._queue)
        self._queue.clear()
        if dropped:
            logger.error(f"File logging disabled; {dropped} queued events dropped.")

    def _reset(self) -> None:
        self._queue.clear()
        self._writer = None
        self._rotation = None
        self._file_path = None
        self._dispatch.attach(None)
        self._unregister_atexit()
        self._state = EngineState.CLOSED
        logger.debug("Engine closed.")

    def _register_atexit(self) -> None:
        if not self._atexit_registered:
            atexit.register(self._close_at_exit)
            self._atexit_registered = True

    def _unregister_atexit(self) -> None:
        if self._atexit_registered:
            atexit.unregister(self._close_at_exit)
            self._atexit_registered = False

    def _close_at_exit(self) -> None:
        if self._state is EngineState.RUNNING:
            self.close()

    @staticmethod
    def _with_callback(future: "Future[None]", on_complete: Optional[Callable[[], None]]) -> "Future[None]":
        if on_complete is not None:
            future.add_done_callback(lambda _f: on_complete())
        return future
