from __future__ import annotations

from .api import (
    close,
    critical,
    debug,
    error,
    get_default_logger,
    info,
    init,
    log,
    warn,
    warning,
)
from .core.engine import FifoLogger
from .core.validator import load_config, validate_config
from .domain.models import (
    DispatchState,
    EngineState,
    FifoLoggerConfig,
    LogEvent,
    WriterState,
)
from .domain.severity import Destination, DrainPeriod, Severity
from .infra.diagnostics import configure_diagnostics

__version__ = "1.0.0"

__all__ = [
    "FifoLogger",
    "FifoLoggerConfig",
    "LogEvent",
    "Severity",
    "Destination",
    "DrainPeriod",
    "EngineState",
    "WriterState",
    "DispatchState",
    "validate_config",
    "load_config",
    "configure_diagnostics",
    "get_default_logger",
    "init",
    "log",
    "debug",
    "info",
    "warn",
    "warning",
    "error",
    "critical",
    "close",
]
