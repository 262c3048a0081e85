# pathmonitor/watch/errors.py

"""
Exceptions raised and reported by the monitoring core
"""
from pathlib import Path
from typing import Any, Callable


class MonitorError(Exception):
    """Base class for pathmonitor errors"""


class InvalidConfiguration(MonitorError, ValueError):
    """A component was constructed with settings it cannot run with"""


class CallbackExecutionFailure(MonitorError):
    """
    A dispatched callback raised while handling a path.

    Reported through logging and the dispatcher's error hooks; never raised
    out of the dispatcher.
    """

    def __init__(self, callback: Callable[..., Any], path: Path, error: BaseException):
        self.callback = callback
        self.path = path
        self.error = error
        name = getattr(callback, '__qualname__', repr(callback))
        super().__init__(f"Callback {name} failed for {path}: {error!r}")


def require_concurrency(concurrency: int):
    """Raise InvalidConfiguration unless concurrency is at least 1"""
    if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1:
        raise InvalidConfiguration(
            f"Callback concurrency requested is {concurrency} but it should at least be 1"
        )
