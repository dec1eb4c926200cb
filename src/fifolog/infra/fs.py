from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides the path manipulation and probing utilities needed by the writer
and the rotation manager: parent directory creation, on-disk size probing
and timestamped archive name computation.
"""

import os
from datetime import datetime
from typing import Optional

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def ensure_parent_dir(path: str) -> None:
    """
    Create the parent directory hierarchy for a target file.

    Args:
        path: Path to the target file.

    Raises:
        OSError: If the hierarchy cannot be created.
    """
    parent = os.path.dirname(os.path.abspath(path))
    if parent and not os.path.exists(parent):
        os.makedirs(parent, exist_ok=True)


def archive_path_for(path: str, when: Optional[datetime] = None) -> str:
    """
    Compute the archive name of a rotated log file.

    The '_YYYY_M_D_H_Min_S' stamp (local time, no zero padding) is inserted
    before the extension, or appended when the file has none. If that name
    is already taken, a '-<n>' counter is added to the stamp.

    Args:
        path: Live log file path.
        when: Rotation instant (defaults to now).

    Returns:
        str: The archive path beside the original file.
    """
    d = when or datetime.now()
    stamp = f"{d.year}_{d.month}_{d.day}_{d.hour}_{d.minute}_{d.second}"
    base, ext = os.path.splitext(path)

    candidate = f"{base}_{stamp}{ext}"
    n = 1
    while os.path.exists(candidate):
        candidate = f"{base}_{stamp}-{n}{ext}"
        n += 1
    return candidate


# -----------------------------------------------------------------------------
# PROBING API
# -----------------------------------------------------------------------------

def file_size(path: str) -> int:
    """
    Return the on-disk size of a file in bytes.

    Raises:
        OSError: If the file cannot be stat-ed (missing, permissions).
    """
    return os.stat(path).st_size
