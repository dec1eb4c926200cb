from __future__ import annotations

"""
Integration tests for file-backed logging.

Runs the engine against real files. The first group uses the real
background tasks; the rotation scenario drives tasks manually but keeps
real files, streams and renames.
"""

import json
import threading
from pathlib import Path
from typing import Any, Dict, List

from fifolog import FifoLogger, Severity
from fifolog.domain.constants import ONE_MB_BYTES


def _cfg(tmp_path: Path, **extra: Any) -> Dict[str, Any]:
    base: Dict[str, Any] = {
        "prefix": "App",
        "destination": "file",
        "file_path": str(tmp_path / "logs" / "app.log"),
        "use_color": False,
        "drain_period_ms": 100,
        "diagnostics_level": None,
    }
    base.update(extra)
    return base


def _lines(path: Path) -> List[str]:
    return path.read_text(encoding="utf-8").splitlines()


# -----------------------------------------------------------------------------
# REAL BACKGROUND TASKS
# -----------------------------------------------------------------------------

def test_filtered_events_never_reach_the_file(tmp_path: Path) -> None:
    """TC-01: With WARNING minimum, only the error line is written."""
    engine = FifoLogger(_cfg(tmp_path, min_level="WARNING"))
    engine.info("x")
    engine.error("y")
    engine.close().result(timeout=5)

    lines = _lines(tmp_path / "logs" / "app.log")
    assert len(lines) == 1
    assert lines[0].startswith("App [error][")
    assert lines[0].endswith("[y][]")


def test_concurrent_producers_keep_per_thread_order(tmp_path: Path) -> None:
    """TC-02: Every event is written once and each producer's order survives."""
    engine = FifoLogger(_cfg(tmp_path, json_mode=True))
    producers = 4
    per_producer = 250

    def _produce(pid: int) -> None:
        for seq in range(per_producer):
            engine.info("tick", {"pid": pid, "seq": seq})

    threads = [threading.Thread(target=_produce, args=(p,)) for p in range(producers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    engine.close().result(timeout=10)

    records = [json.loads(line) for line in _lines(tmp_path / "logs" / "app.log")]
    assert len(records) == producers * per_producer

    seen: Dict[int, List[int]] = {p: [] for p in range(producers)}
    for record in records:
        assert set(record) == {"name", "severity", "date", "message", "optionalParams"}
        params = record["optionalParams"][0]
        seen[params["pid"]].append(params["seq"])
    for pid in range(producers):
        assert seen[pid] == list(range(per_producer))


def test_close_callback_and_context_manager(tmp_path: Path) -> None:
    """TC-03: The completion callback fires once the file is released."""
    done = threading.Event()
    with FifoLogger(_cfg(tmp_path)) as engine:
        engine.log(Severity.CRITICAL, "inside")
        engine.close(done.set)

    assert done.wait(timeout=5)
    assert _lines(tmp_path / "logs" / "app.log")[0].endswith("[inside][]")


def test_appends_to_existing_file(tmp_path: Path) -> None:
    """TC-03: Reopening the same path appends after previous content."""
    first = FifoLogger(_cfg(tmp_path))
    first.info("one")
    first.close().result(timeout=5)

    second = FifoLogger(_cfg(tmp_path))
    second.info("two")
    second.close().result(timeout=5)

    lines = _lines(tmp_path / "logs" / "app.log")
    assert [line.split("[")[-2].rstrip("]") for line in lines] == ["one", "two"]


# -----------------------------------------------------------------------------
# ROTATION WITH REAL FILES
# -----------------------------------------------------------------------------

def test_size_rotation_archives_live_file(tmp_path: Path, task_factory: Any) -> None:
    """TC-04: A file at the ceiling is archived after the next drain pass."""
    live = tmp_path / "logs" / "app.log"
    live.parent.mkdir()
    live.write_bytes(b"x" * ONE_MB_BYTES)

    engine = FifoLogger(_cfg(tmp_path, rotate=True, rotate_size_mb=1), task_factory=task_factory)
    engine.info("last line of the old file")

    task_factory.latest("fifolog-rotation").fire()
    assert engine.rotation.pending is True

    task_factory.latest("fifolog-dispatch").fire()
    assert engine.rotation.pending is False

    engine.info("first line of the new file")
    engine.close().result(timeout=5)

    archives = sorted(p for p in live.parent.iterdir() if p.name != "app.log")
    assert len(archives) == 1
    assert archives[0].name.startswith("app_")
    assert archives[0].suffix == ".log"

    archived = archives[0].read_text(encoding="utf-8")
    assert archived.startswith("x" * 16)
    assert archived.rstrip("\n").endswith("[last line of the old file][]")

    new_lines = _lines(live)
    assert len(new_lines) == 1
    assert new_lines[0].endswith("[first line of the new file][]")


def test_below_ceiling_does_not_rotate(tmp_path: Path, task_factory: Any) -> None:
    """TC-04: Nothing happens while the file is smaller than the ceiling."""
    engine = FifoLogger(_cfg(tmp_path, rotate=True, rotate_size_mb=1), task_factory=task_factory)
    engine.info("small")
    task_factory.latest("fifolog-dispatch").fire()
    task_factory.latest("fifolog-rotation").fire()
    task_factory.latest("fifolog-dispatch").fire()
    engine.close().result(timeout=5)

    assert [p.name for p in (tmp_path / "logs").iterdir()] == ["app.log"]
