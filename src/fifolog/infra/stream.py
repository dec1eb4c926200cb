from __future__ import annotations

"""
Append-Mode File Stream.

A thin buffered wrapper over an append-mode text file that reports
backpressure: write() only buffers and answers whether more data should be
accepted, flush() pushes the buffer to the operating system.
"""

from typing import List, Protocol

from fifolog.domain.constants import STREAM_HIGH_WATER_MARK


class Stream(Protocol):
    """Writable stream contract used by the destination writer."""

    def write(self, data: str) -> bool: ...

    def flush(self) -> None: ...

    def close(self) -> None: ...

    def take_pending(self) -> List[str]: ...


class FileStream:
    """
    Buffered append-mode file stream with a high-water mark.

    Args:
        path: Target file, opened in append mode (UTF-8).
        high_water_mark: Buffered byte count at which write() reports backpressure.

    Raises:
        OSError: If the file cannot be opened.
    """

    def __init__(self, path: str, high_water_mark: int = STREAM_HIGH_WATER_MARK) -> None:
        self.path = path
        self.high_water_mark = high_water_mark
        self._fh = open(path, "a", encoding="utf-8")
        self._pending: List[str] = []
        self._pending_bytes = 0

    @property
    def pending_bytes(self) -> int:
        return self._pending_bytes

    def write(self, data: str) -> bool:
        self._pending.append(data)
        self._pending_bytes += len(data.encode("utf-8"))
        return self._pending_bytes < self.high_water_mark

    def flush(self) -> None:
        if self._pending:
            self._fh.write("".join(self._pending))
            self._pending.clear()
            self._pending_bytes = 0
        self._fh.flush()

    def close(self) -> None:
        try:
            self.flush()
        finally:
            self._fh.close()

    def take_pending(self) -> List[str]:
        """Detach the data not yet handed to the operating system."""
        pending, self._pending = self._pending, []
        self._pending_bytes = 0
        return pending
