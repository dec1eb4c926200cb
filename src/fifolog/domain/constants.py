from __future__ import annotations

"""
Domain Constants.

Provides centralized access to the numeric limits and markers shared by the
writer, the dispatch loop and the rotation manager.
"""

# -----------------------------------------------------------------------------
# STREAM ERROR RECOVERY
# -----------------------------------------------------------------------------
MAX_STREAM_ERROR_RETRIES = 5
STREAM_ERROR_RETRY_DELAY_MS = 1000

# -----------------------------------------------------------------------------
# ROTATION
# -----------------------------------------------------------------------------
ROTATION_CHECK_INTERVAL_MS = 10000
ONE_MB_BYTES = 1048576
DEFAULT_ROTATE_SIZE_MB = 10

# -----------------------------------------------------------------------------
# STREAM BUFFERING & RENDERING
# -----------------------------------------------------------------------------
STREAM_HIGH_WATER_MARK = 16 * 1024
DEFAULT_DRAIN_PERIOD_MS = 100
ELLIPSIS = "..."
