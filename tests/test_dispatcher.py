"""Tests for :mod:`pathmonitor.watch.dispatcher`."""
import asyncio
import threading
import time
from pathlib import Path

import pytest

from pathmonitor.watch import CallbackDispatcher, CallbackExecutionFailure, InvalidConfiguration


@pytest.mark.parametrize("concurrency", [0, -1])
def test_concurrency_below_one_is_rejected(concurrency):
    with pytest.raises(InvalidConfiguration) as exc_info:
        CallbackDispatcher(concurrency)

    assert str(exc_info.value) == (
        f"Callback concurrency requested is {concurrency} but it should at least be 1"
    )


@pytest.mark.asyncio
async def test_sync_callback_receives_the_path(recorder):
    dispatcher = CallbackDispatcher(2)
    path = Path("/tmp/some/file.txt")

    assert dispatcher.submit(recorder.callback(), path)
    await dispatcher.drain()

    assert recorder.paths == [path]
    assert dispatcher.stats['completed'] == 1
    await dispatcher.stop()


@pytest.mark.asyncio
async def test_coroutine_callback_is_awaited():
    dispatcher = CallbackDispatcher(1)
    seen = []

    async def callback(path):
        await asyncio.sleep(0)
        seen.append(path)

    dispatcher.submit(callback, Path("/a"))
    await dispatcher.drain()

    assert seen == [Path("/a")]
    await dispatcher.stop()


@pytest.mark.asyncio
async def test_submit_does_not_wait_for_the_callback():
    dispatcher = CallbackDispatcher(1)
    release = threading.Event()
    done = []

    def blocking(path):
        release.wait(timeout=5)
        done.append(path)

    assert dispatcher.submit(blocking, Path("/a"))
    assert done == []

    release.set()
    await dispatcher.drain()
    assert done == [Path("/a")]
    await dispatcher.stop()


@pytest.mark.asyncio
async def test_at_most_concurrency_callbacks_run_at_once():
    dispatcher = CallbackDispatcher(2)
    lock = threading.Lock()
    running = 0
    peak = 0
    finished = []

    def slow(path):
        nonlocal running, peak
        with lock:
            running += 1
            peak = max(peak, running)
        time.sleep(0.05)
        with lock:
            running -= 1
            finished.append(path)

    for i in range(6):
        dispatcher.submit(slow, Path(f"/f{i}"))
    await dispatcher.drain()

    assert len(finished) == 6
    assert peak <= 2
    await dispatcher.stop()


@pytest.mark.asyncio
async def test_failing_callback_does_not_affect_others(recorder):
    failures = []
    dispatcher = CallbackDispatcher(1, on_error=failures.append)

    def broken(path):
        raise RuntimeError("boom")

    dispatcher.submit(broken, Path("/a"))
    dispatcher.submit(recorder.callback(), Path("/a"))
    await dispatcher.drain()

    assert recorder.paths == [Path("/a")]
    assert dispatcher.stats['failed'] == 1
    assert dispatcher.stats['completed'] == 1

    assert len(failures) == 1
    failure = failures[0]
    assert isinstance(failure, CallbackExecutionFailure)
    assert failure.callback is broken
    assert failure.path == Path("/a")
    assert isinstance(failure.error, RuntimeError)
    await dispatcher.stop()


@pytest.mark.asyncio
async def test_failing_error_hook_is_contained(recorder):
    dispatcher = CallbackDispatcher(1)

    def bad_hook(failure):
        raise ValueError("hook")

    dispatcher.add_error_hook(bad_hook)
    dispatcher.submit(lambda path: 1 / 0, Path("/a"))
    dispatcher.submit(recorder.callback(), Path("/b"))
    await dispatcher.drain()

    assert recorder.paths == [Path("/b")]
    await dispatcher.stop()


@pytest.mark.asyncio
async def test_stopped_dispatcher_rejects_work(recorder):
    dispatcher = CallbackDispatcher(1)
    await dispatcher.stop()

    assert dispatcher.is_stopped
    assert not dispatcher.submit(recorder.callback(), Path("/a"))
    assert dispatcher.get_stats()['submitted'] == 0


@pytest.mark.asyncio
async def test_stop_finishes_in_flight_callbacks(recorder):
    dispatcher = CallbackDispatcher(2)

    def slow(path):
        time.sleep(0.05)
        recorder.callback()(path)

    dispatcher.submit(slow, Path("/a"))
    await dispatcher.stop()

    assert recorder.paths == [Path("/a")]
    assert dispatcher.get_stats()['pending'] == 0
