from __future__ import annotations

"""
Diagnostics Channel.

The engine reports its own failures (stream errors, retries, rotation
problems) through the standard 'logging' module under the 'fifolog'
namespace, never through its own queue. This module attaches a single
stderr handler to that namespace, idempotently, and can detach it again.
Handlers are tagged so that handlers installed by the host application are
never touched.
"""

import logging
import sys
from typing import Dict

DIAGNOSTICS_LOGGER_NAME: str = "fifolog"
DIAGNOSTICS_FMT: str = "fifolog: %(levelname)s | %(message)s"

# Internal attribute used to tag and identify our own handlers
_HANDLER_TAG_ATTR: str = "_fifolog_diagnostics_handler"

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


# ==============================================================================
# PUBLIC API
# ==============================================================================

def configure_diagnostics(level: str = "WARNING", *, force: bool = False) -> logging.Logger:
    """
    Attach the stderr diagnostics handler to the 'fifolog' logger.

    A second call is a no-op unless `force` is given, in which case the
    handler is rebuilt with the new level.

    Args:
        level: Minimum severity of reported diagnostics.
        force: Rebuild the handler even if one is already attached.

    Returns:
        logging.Logger: The diagnostics logger.
    """
    diag = logging.getLogger(DIAGNOSTICS_LOGGER_NAME)

    ours = [h for h in diag.handlers if _is_our_handler(h)]
    if ours and not force:
        return diag

    _remove_our_handlers(diag)

    level_int = _parse_level(level)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level_int)
    handler.setFormatter(logging.Formatter(DIAGNOSTICS_FMT))
    _tag_handler(handler)

    diag.addHandler(handler)
    if diag.level == logging.NOTSET or diag.level > level_int:
        diag.setLevel(level_int)
    return diag


def reset_diagnostics() -> None:
    """Detach every handler installed by configure_diagnostics."""
    _remove_our_handlers(logging.getLogger(DIAGNOSTICS_LOGGER_NAME))


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _parse_level(level: str) -> int:
    """Convert a string-based logging level to its numeric constant."""
    if not level:
        return logging.WARNING
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.WARNING)


def _tag_handler(handler: logging.Handler) -> None:
    setattr(handler, _HANDLER_TAG_ATTR, True)


def _is_our_handler(handler: logging.Handler) -> bool:
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


def _remove_our_handlers(target: logging.Logger) -> None:
    """Identify and detach all internally-managed handlers."""
    for h in list(target.handlers):
        if _is_our_handler(h):
            target.removeHandler(h)
            h.close()
