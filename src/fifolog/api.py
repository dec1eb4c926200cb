from __future__ import annotations

"""
Module-Level Facade.

Exposes a process-wide default FifoLogger through plain functions, for
callers that want a single shared logger without passing an instance around.
Independent loggers are created by instantiating FifoLogger directly.
"""

import threading
from concurrent.futures import Future
from typing import Any, Callable, Optional

from fifolog.core.engine import FifoLogger

_DEFAULT: Optional[FifoLogger] = None
_DEFAULT_LOCK = threading.Lock()


def get_default_logger() -> FifoLogger:
    """Return the process-wide engine, creating it on first use."""
    global _DEFAULT
    if _DEFAULT is None:
        with _DEFAULT_LOCK:
            if _DEFAULT is None:
                _DEFAULT = FifoLogger()
    return _DEFAULT


def init(config: Any = None, **overrides: Any) -> FifoLogger:
    return get_default_logger().init(config, **overrides)


def close(on_complete: Optional[Callable[[], None]] = None) -> "Future[None]":
    return get_default_logger().close(on_complete)


def log(level: Any, message: Any, *attachments: Any) -> None:
    get_default_logger().log(level, message, *attachments)


def debug(message: Any, *attachments: Any) -> None:
    get_default_logger().debug(message, *attachments)


def info(message: Any, *attachments: Any) -> None:
    get_default_logger().info(message, *attachments)


def warn(message: Any, *attachments: Any) -> None:
    get_default_logger().warn(message, *attachments)


warning = warn


def error(message: Any, *attachments: Any) -> None:
    get_default_logger().error(message, *attachments)


def critical(message: Any, *attachments: Any) -> None:
    get_default_logger().critical(message, *attachments)
