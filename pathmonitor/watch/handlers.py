# pathmonitor/watch/handlers.py

"""
watchdog event handlers feeding the monitoring coordinator
"""
import concurrent.futures
import logging
import os
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from watchdog.events import (
    FileSystemEvent,
    FileSystemEventHandler,
    FileCreatedEvent,
    FileModifiedEvent,
    FileDeletedEvent,
    FileMovedEvent,
    DirCreatedEvent,
    DirModifiedEvent,
    DirDeletedEvent,
    DirMovedEvent
)

from .events import FileEvent, EventType
from .messages import EventAtPath
from .patterns import PatternFilter
from ..utils.file_utils import normalize_path

logger = logging.getLogger(__name__)


class EventHandler(FileSystemEventHandler):
    """
    Converts watchdog events to FileEvents and passes them to a sink

    Runs on the observer thread; errors are logged and counted, never
    raised back into watchdog.
    """

    def __init__(self, sink: Callable[[FileEvent], Any],
                 pattern_filter: Optional[PatternFilter] = None):
        """
        Initialize event handler

        Args:
            sink: Called with each converted, unfiltered FileEvent
            pattern_filter: Pattern filter for ignoring paths
        """
        self.sink = sink
        self.pattern_filter = pattern_filter or PatternFilter()

        # Statistics
        self.stats = {
            'events_received': 0,
            'events_forwarded': 0,
            'events_ignored': 0,
            'errors': 0,
            'last_event': None,
        }

    def on_any_event(self, event: FileSystemEvent):
        """Handle any file system event"""
        self.stats['events_received'] += 1
        self.stats['last_event'] = datetime.now()

        try:
            for file_event in self._convert_event(event):
                if self.pattern_filter.should_ignore(file_event.src_path):
                    self.stats['events_ignored'] += 1
                    logger.debug(f"Ignoring event for {file_event.src_path}")
                    continue

                self.sink(file_event)
                self.stats['events_forwarded'] += 1

        except Exception as e:
            self.stats['errors'] += 1
            logger.error(f"Error handling event {event}: {e}")

    def _convert_event(self, event: FileSystemEvent) -> List[FileEvent]:
        """Convert watchdog event to our internal format"""
        is_directory = event.is_directory
        src_path = normalize_path(os.fsdecode(event.src_path))

        if isinstance(event, (FileMovedEvent, DirMovedEvent)):
            # A rename is reported as the old path going away and the new one appearing
            dest_path = normalize_path(os.fsdecode(event.dest_path))
            return [
                FileEvent(EventType.DELETED, src_path, is_directory=is_directory),
                FileEvent(EventType.CREATED, dest_path, is_directory=is_directory),
            ]

        if isinstance(event, (FileCreatedEvent, DirCreatedEvent)):
            event_type = EventType.CREATED
        elif isinstance(event, (FileModifiedEvent, DirModifiedEvent)):
            event_type = EventType.MODIFIED
        elif isinstance(event, (FileDeletedEvent, DirDeletedEvent)):
            event_type = EventType.DELETED
        else:
            # opened/closed and anything newer
            return []

        return [FileEvent(event_type, src_path, is_directory=is_directory)]

    def get_stats(self) -> Dict[str, Any]:
        """Get handler statistics"""
        return self.stats.copy()


class CoordinatorEventHandler(EventHandler):
    """
    Event handler that posts EventAtPath messages to a MonitorCoordinator
    """

    def __init__(self, coordinator: Any,
                 pattern_filter: Optional[PatternFilter] = None):
        super().__init__(self._forward, pattern_filter)
        self.coordinator = coordinator

    def _forward(self, event: FileEvent):
        """Thread-safe hand-off (watchdog thread -> coordinator loop)"""
        if not self.coordinator.is_running:
            logger.debug(f"Coordinator not running, dropping {event}")
            return

        logger.debug(f"Forwarding {event}")
        future = self.coordinator.send_threadsafe(EventAtPath(event.event_type, event.src_path))
        future.add_done_callback(self._log_failure)

    @staticmethod
    def _log_failure(future: concurrent.futures.Future):
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Error delivering event to coordinator: {error}")
