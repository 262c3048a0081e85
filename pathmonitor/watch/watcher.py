# pathmonitor/watch/watcher.py

"""
Directory watcher: schedules watchdog observers for registered paths
"""
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Union
from datetime import datetime

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver, ObservedWatch
from watchdog.observers.polling import PollingObserver

from ..utils.file_utils import normalize_path, is_descendant

logger = logging.getLogger(__name__)


class DirectoryWatcher:
    """
    Watch source backed by a single watchdog observer

    File paths are watched through their parent directory. A recursive watch
    replaces the watches it covers so each change is reported once.
    """

    def __init__(self, handler: FileSystemEventHandler,
                 use_polling: bool = False,
                 poll_interval: float = 1.0,
                 observer_factory: Optional[Callable[[], BaseObserver]] = None):
        """
        Initialize directory watcher

        Args:
            handler: Event handler receiving watchdog events
            use_polling: Use polling instead of OS events
            poll_interval: Polling interval in seconds
            observer_factory: Builds the observer (overrides use_polling)
        """
        self.handler = handler
        self.use_polling = use_polling
        self.poll_interval = poll_interval
        self._observer_factory = observer_factory or self._default_observer

        self.observer: Optional[BaseObserver] = None
        self._watches: Dict[Path, Tuple[ObservedWatch, bool]] = {}
        self._lock = threading.RLock()

        # State
        self.is_watching = False
        self.stats = {
            'start_time': None,
            'watches_scheduled': 0,
        }

    @classmethod
    def from_config(cls, config: Any, handler: FileSystemEventHandler) -> "DirectoryWatcher":
        """Build a watcher from a WatchConfig"""
        return cls(handler, use_polling=config.use_polling, poll_interval=config.poll_interval)

    def _default_observer(self) -> BaseObserver:
        if self.use_polling:
            logger.debug(f"Using polling observer (interval: {self.poll_interval}s)")
            return PollingObserver(timeout=self.poll_interval)
        logger.debug("Using OS event observer")
        return Observer()

    def _ensure_observer(self) -> BaseObserver:
        if self.observer is None:
            self.observer = self._observer_factory()
        return self.observer

    def _is_covered(self, directory: Path, recursive: bool) -> bool:
        existing = self._watches.get(directory)
        if existing is not None and (existing[1] or not recursive):
            return True
        return any(
            is_recursive and is_descendant(directory, watched)
            for watched, (_, is_recursive) in self._watches.items()
        )

    def watch(self, path: Union[str, Path], recursive: bool = False) -> bool:
        """
        Make sure events for path are observed

        Args:
            path: File or directory (a file is watched via its parent)
            recursive: Watch the whole directory subtree

        Returns:
            True if path is watched
        """
        path = normalize_path(path)
        if path.is_dir():
            directory = path
        else:
            directory = path.parent
            recursive = False

        if not directory.is_dir():
            logger.warning(f"Cannot watch non-existent directory: {directory}")
            return False

        with self._lock:
            if self._is_covered(directory, recursive):
                return True

            observer = self._ensure_observer()
            if recursive:
                replaced = [
                    watched for watched in self._watches
                    if watched == directory or is_descendant(watched, directory)
                ]
            else:
                replaced = []

            try:
                for watched in replaced:
                    observer.unschedule(self._watches.pop(watched)[0])

                watch = observer.schedule(self.handler, str(directory), recursive=recursive)
            except Exception as e:
                logger.error(f"Failed to watch directory {directory}: {e}")
                return False

            self._watches[directory] = (watch, recursive)
            self.stats['watches_scheduled'] += 1

        logger.info(f"Watching directory: {directory} (recursive: {recursive})")
        return True

    def start(self) -> bool:
        """Start the observer thread"""
        with self._lock:
            if self.is_watching:
                logger.warning("DirectoryWatcher is already running")
                return True

            try:
                self._ensure_observer().start()
            except Exception as e:
                logger.error(f"Failed to start DirectoryWatcher: {e}")
                return False

            self.is_watching = True
            self.stats['start_time'] = datetime.now()

        logger.info(f"DirectoryWatcher started with {len(self._watches)} watches")
        return True

    def stop(self) -> bool:
        """Stop the observer thread and drop every watch"""
        with self._lock:
            if not self.is_watching:
                return True

            try:
                if self.observer:
                    self.observer.stop()
                    self.observer.join(timeout=10)
            except Exception as e:
                logger.error(f"Error stopping DirectoryWatcher: {e}")
                return False
            finally:
                self.observer = None
                self._watches.clear()
                self.is_watching = False

        logger.info("DirectoryWatcher stopped")
        return True

    def watched_directories(self) -> Dict[Path, bool]:
        """Watched directory -> recursive flag"""
        with self._lock:
            return {directory: recursive for directory, (_, recursive) in self._watches.items()}

    def get_status(self) -> Dict[str, Any]:
        """Get watcher status"""
        handler_stats = self.handler.get_stats() if hasattr(self.handler, 'get_stats') else {}
        start_time = self.stats['start_time']

        return {
            'is_watching': self.is_watching,
            'use_polling': self.use_polling,
            'poll_interval': self.poll_interval if self.use_polling else None,
            'directories': {
                str(directory): recursive
                for directory, recursive in self.watched_directories().items()
            },
            'duration': (datetime.now() - start_time).total_seconds() if start_time else 0,
            'stats': {**self.stats, **handler_stats},
        }
