"""
Pytest configuration and fixtures for pathmonitor tests.
"""
import asyncio
import threading
import time
from pathlib import Path
from types import SimpleNamespace

import pytest
import pytest_asyncio

from pathmonitor.watch import MonitorCoordinator


@pytest.fixture
def tree(tmp_path):
    """
    root/
      level1/
        level2/
      hello.there
    """
    root = tmp_path / "root"
    level1 = root / "level1"
    level2 = level1 / "level2"
    level2.mkdir(parents=True)
    file_in_root = root / "hello.there"
    file_in_root.write_text("hello")
    return SimpleNamespace(root=root, level1=level1, level2=level2, file=file_in_root)


class Recorder:
    """Thread-safe collector for callback invocations."""

    def __init__(self):
        self.calls = []
        self._lock = threading.Lock()

    def callback(self, label="cb"):
        def record(path: Path):
            with self._lock:
                self.calls.append((label, path))
        record.__qualname__ = f"record[{label}]"
        return record

    @property
    def paths(self):
        with self._lock:
            return [path for _, path in self.calls]

    @property
    def labels(self):
        with self._lock:
            return [label for label, _ in self.calls]


@pytest.fixture
def recorder():
    return Recorder()


def dummy_function(path: Path):
    pass


async def wait_for(predicate, timeout: float = 5.0, interval: float = 0.02) -> bool:
    """Poll predicate on the loop until it holds or timeout passes."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        await asyncio.sleep(interval)
    return predicate()


@pytest_asyncio.fixture
async def monitor():
    """Started coordinator, stopped after the test."""
    coordinator = MonitorCoordinator(concurrency=4)
    await coordinator.start()
    yield coordinator
    await coordinator.stop()
