# pathmonitor/watch/monitor.py

"""
Monitoring coordinator: owns the callback registries and routes events
"""
import asyncio
import concurrent.futures
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Union

from .dispatcher import CallbackDispatcher, ErrorHook
from .errors import require_concurrency
from .events import EventType
from .messages import EventAtPath, Message, RegisterCallback, UnRegisterCallback
from .registry import Callback, CallbackRegistry, DirectoryLister
from ..utils.file_utils import normalize_path

logger = logging.getLogger(__name__)

RegistryUpdate = Callable[[CallbackRegistry], CallbackRegistry]


class MonitorCoordinator:
    """
    Registers callbacks per (event type, path) and fires them for events

    Each event type has its own CallbackRegistry. Mutations of one event
    type are serialized by a lock and swap in a new registry once complete;
    lookups read the current registry without locking.
    """

    def __init__(self, concurrency: int = 4,
                 event_types: Iterable[Union[EventType, str]] = EventType,
                 allow_duplicates: bool = True,
                 watch_source: Any = None,
                 list_directories: Optional[DirectoryLister] = None,
                 on_error: ErrorHook = None):
        """
        Initialize monitor coordinator

        Args:
            concurrency: Maximum number of callbacks running at once (>= 1)
            event_types: Event types to keep registries for
            allow_duplicates: Register the same callback twice at one path
            watch_source: Optional DirectoryWatcher told about new registrations
            list_directories: Directory enumeration used to seed recursive
                registrations
            on_error: Hook for callback failures

        Raises:
            InvalidConfiguration: If concurrency is less than 1
        """
        require_concurrency(concurrency)

        self.concurrency = concurrency
        self.dispatcher = CallbackDispatcher(concurrency, on_error=on_error)
        self.watch_source = watch_source

        self._registries: Dict[EventType, CallbackRegistry] = {
            EventType.parse(event_type): CallbackRegistry(
                allow_duplicates=allow_duplicates,
                list_directories=list_directories,
            )
            for event_type in event_types
        }
        self._locks: Dict[EventType, asyncio.Lock] = {
            event_type: asyncio.Lock() for event_type in self._registries
        }

        # State
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self.is_running = False
        self._stopped = False
        self.stats = {
            'registrations': 0,
            'unregistrations': 0,
            'events_received': 0,
            'events_matched': 0,
            'callbacks_dispatched': 0,
        }

        tracked = ", ".join(event_type.value for event_type in self._registries)
        logger.info(f"MonitorCoordinator initialized (concurrency={concurrency}, events: {tracked})")

    @classmethod
    def from_config(cls, config: Any, watch_source: Any = None) -> "MonitorCoordinator":
        """
        Build a coordinator from a MonitorConfig

        Args:
            config: MonitorConfig instance
            watch_source: Optional DirectoryWatcher
        """
        return cls(
            concurrency=config.callback_concurrency,
            event_types=config.event_types,
            allow_duplicates=config.allow_duplicate_callbacks,
            watch_source=watch_source,
        )

    def attach_watch_source(self, watch_source: Any):
        """Attach the watcher that feeds events and watches registered paths"""
        self.watch_source = watch_source

    # ----------------------------------------------------------
    # LIFECYCLE
    # ----------------------------------------------------------

    async def start(self) -> bool:
        """Start serving on the running event loop"""
        if self.is_running:
            logger.warning("MonitorCoordinator is already running")
            return True

        if self._stopped:
            logger.error("MonitorCoordinator was stopped and cannot be restarted")
            return False

        self._loop = asyncio.get_running_loop()
        self.is_running = True

        if self.watch_source is not None:
            if not self.watch_source.start():
                logger.warning("Watch source failed to start; only posted events will be handled")

        logger.info("MonitorCoordinator started")
        return True

    async def stop(self) -> bool:
        """Stop the watch source and wait for in-flight callbacks"""
        if self._stopped:
            return True

        self.is_running = False
        self._stopped = True

        if self.watch_source is not None:
            await asyncio.to_thread(self.watch_source.stop)

        await self.dispatcher.stop()

        logger.info("MonitorCoordinator stopped")
        return True

    # ----------------------------------------------------------
    # MESSAGES
    # ----------------------------------------------------------

    async def send(self, message: Message) -> Any:
        """
        Route one message to the matching operation

        Raises:
            TypeError: If message is not a known message type
        """
        if isinstance(message, RegisterCallback):
            return await self.register_callback(
                message.event_type, message.path, message.callback, message.recursive
            )
        elif isinstance(message, UnRegisterCallback):
            return await self.unregister_callback(
                message.event_type, message.path, message.recursive
            )
        elif isinstance(message, EventAtPath):
            return await self.event_at_path(message.event_type, message.path)

        raise TypeError(f"Unsupported message: {message!r}")

    def send_threadsafe(self, message: Message) -> concurrent.futures.Future:
        """
        Hand a message to the coordinator's loop from another thread

        Returns:
            Future resolving to the result of send()

        Raises:
            RuntimeError: If the coordinator is not running
        """
        if not self.is_running or self._loop is None:
            raise RuntimeError("MonitorCoordinator is not running")

        return asyncio.run_coroutine_threadsafe(self.send(message), self._loop)

    # ----------------------------------------------------------
    # REGISTRATION
    # ----------------------------------------------------------

    async def register_callback(self, event_type: Union[EventType, str],
                                path: Union[str, Path], callback: Callback,
                                recursive: bool = False):
        """
        Register callback for event_type at path

        Visible to every lookup once this returns.

        Args:
            event_type: Event type to listen for
            path: File or directory
            callback: Callable invoked with the event path
            recursive: Cover the directory subtree
        """
        event_type = EventType.parse(event_type)
        path = normalize_path(path)

        await self._modify_callback_registry(
            event_type,
            lambda registry: registry.with_callback_for(path, callback, recursive),
        )
        self.stats['registrations'] += 1
        logger.info(f"Registered callback for {event_type.value} at {path} (recursive: {recursive})")

        if self.watch_source is not None:
            # Scheduling a recursive OS watch walks the tree too
            await asyncio.to_thread(self.watch_source.watch, path, recursive)

    async def unregister_callback(self, event_type: Union[EventType, str],
                                  path: Union[str, Path], recursive: bool = False):
        """
        Remove every callback for event_type at path

        Args:
            event_type: Event type
            path: File or directory
            recursive: Also remove descendant directory entries
        """
        event_type = EventType.parse(event_type)
        path = normalize_path(path)

        await self._modify_callback_registry(
            event_type,
            lambda registry: registry.without_callbacks_for(path, recursive),
        )
        self.stats['unregistrations'] += 1
        logger.info(f"Unregistered callbacks for {event_type.value} at {path} (recursive: {recursive})")

    async def _modify_callback_registry(self, event_type: Union[EventType, str],
                                        modify: RegistryUpdate):
        # Single writer per event type; the update may walk the filesystem,
        # so it runs on a worker thread while lookups keep using the old state
        event_type = EventType.parse(event_type)
        if event_type not in self._registries:
            raise ValueError(f"Event type {event_type.value} is not tracked by this monitor")

        async with self._locks[event_type]:
            current = self._registries[event_type]
            self._registries[event_type] = await asyncio.to_thread(modify, current)

    # ----------------------------------------------------------
    # EVENTS
    # ----------------------------------------------------------

    async def event_at_path(self, event_type: Union[EventType, str],
                            path: Union[str, Path]) -> int:
        """
        Dispatch every callback matching an event at path

        Args:
            event_type: Event type reported
            path: Path the event happened at

        Returns:
            Number of callbacks handed to the dispatcher
        """
        self.stats['events_received'] += 1
        event_type = EventType.parse(event_type)
        registry = self._registries.get(event_type)
        if registry is None:
            logger.debug(f"Ignoring untracked event type {event_type.value} at {path}")
            return 0

        path = normalize_path(path)
        callbacks = registry.resolve(path)
        if not callbacks:
            logger.debug(f"No callbacks for {event_type.value} at {path}")
            return 0

        self.stats['events_matched'] += 1
        dispatched = 0
        for callback in callbacks:
            if self.dispatcher.submit(callback, path):
                dispatched += 1

        self.stats['callbacks_dispatched'] += dispatched
        logger.debug(f"Dispatched {dispatched} callbacks for {event_type.value} at {path}")
        return dispatched

    def callbacks_for(self, event_type: Union[EventType, str],
                      path: Union[str, Path]) -> Optional[Tuple[Callback, ...]]:
        """Callbacks registered exactly at path for event_type, or None"""
        registry = self._registries.get(EventType.parse(event_type))
        if registry is None:
            return None
        return registry.callbacks_for(path)

    def get_status(self) -> Dict[str, Any]:
        """Get monitor status"""
        watch_status = None
        if self.watch_source is not None and hasattr(self.watch_source, 'get_status'):
            watch_status = self.watch_source.get_status()

        return {
            'is_running': self.is_running,
            'concurrency': self.concurrency,
            'entries': {
                event_type.value: len(registry)
                for event_type, registry in self._registries.items()
            },
            'stats': self.stats.copy(),
            'dispatcher': self.dispatcher.get_stats(),
            'watch_source': watch_status,
        }
