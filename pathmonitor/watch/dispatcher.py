# pathmonitor/watch/dispatcher.py

"""
Bounded-concurrency execution of matched callbacks
"""
import asyncio
import inspect
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Dict, List, Set

from .errors import CallbackExecutionFailure, require_concurrency
from .registry import Callback
from ..utils.logger import log_exception

logger = logging.getLogger(__name__)

ErrorHook = Callable[[CallbackExecutionFailure], Any]


class CallbackDispatcher:
    """
    Runs callbacks off the caller's path, at most ``concurrency`` at a time

    Coroutine callbacks are awaited on the event loop; plain callables run on
    a thread pool of the same size so a blocking callback cannot stall the
    loop. There is no timeout: a callback that never returns keeps its slot.
    """

    def __init__(self, concurrency: int = 4, on_error: ErrorHook = None):
        """
        Initialize dispatcher

        Args:
            concurrency: Maximum number of callbacks running at once
            on_error: Hook called with a CallbackExecutionFailure when a
                callback raises
        """
        require_concurrency(concurrency)

        self.concurrency = concurrency
        self._semaphore = asyncio.Semaphore(concurrency)
        self._executor = ThreadPoolExecutor(
            max_workers=concurrency,
            thread_name_prefix="pathmonitor-callback",
        )
        self._tasks: Set[asyncio.Task] = set()
        self._error_hooks: List[ErrorHook] = [on_error] if on_error else []
        self._stopped = False

        self.stats = {
            'submitted': 0,
            'completed': 0,
            'failed': 0,
            'in_flight': 0,
        }

    def add_error_hook(self, hook: ErrorHook):
        """Register a hook for callback failures"""
        self._error_hooks.append(hook)

    def submit(self, callback: Callback, path: Path) -> bool:
        """
        Schedule callback(path) and return without waiting for it

        Must be called from the event loop thread.

        Returns:
            True if accepted, False if the dispatcher is stopped
        """
        if self._stopped:
            logger.warning(f"Dispatcher stopped, dropping callback for {path}")
            return False

        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run(callback, path))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self.stats['submitted'] += 1
        return True

    async def _run(self, callback: Callback, path: Path):
        async with self._semaphore:
            self.stats['in_flight'] += 1
            try:
                if inspect.iscoroutinefunction(callback):
                    await callback(path)
                else:
                    loop = asyncio.get_running_loop()
                    result = await loop.run_in_executor(self._executor, callback, path)
                    if inspect.isawaitable(result):
                        await result
                self.stats['completed'] += 1
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._report(CallbackExecutionFailure(callback, path, e))
            finally:
                self.stats['in_flight'] -= 1

    def _report(self, failure: CallbackExecutionFailure):
        self.stats['failed'] += 1
        log_exception(
            logger,
            failure.error,
            message=str(failure),
            extra={'path': str(failure.path)},
        )

        for hook in self._error_hooks:
            try:
                hook(failure)
            except Exception as e:
                logger.error(f"Error in callback failure hook: {e}")

    async def drain(self):
        """Wait until every submitted callback has finished"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def stop(self):
        """Refuse new work, finish in-flight callbacks and release the pool"""
        if self._stopped:
            return

        self._stopped = True
        await self.drain()
        self._executor.shutdown(wait=False)
        logger.info(f"CallbackDispatcher stopped ({self.stats['completed']} completed, "
                    f"{self.stats['failed']} failed)")

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    def get_stats(self) -> Dict[str, Any]:
        """Get dispatcher statistics"""
        return {
            **self.stats,
            'concurrency': self.concurrency,
            'pending': len(self._tasks),
        }
