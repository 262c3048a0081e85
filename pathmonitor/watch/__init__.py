# pathmonitor/watch/__init__.py

"""
pathmonitor watch module
Callback registry, dispatcher and coordinator for filesystem events
"""
from .events import EventType, FileEvent
from .errors import MonitorError, InvalidConfiguration, CallbackExecutionFailure
from .registry import CallbackRegistry, Registration, RegistryEntry
from .dispatcher import CallbackDispatcher
from .messages import RegisterCallback, UnRegisterCallback, EventAtPath
from .monitor import MonitorCoordinator
from .patterns import PatternFilter
from .handlers import EventHandler, CoordinatorEventHandler
from .watcher import DirectoryWatcher

__all__ = [
    'EventType',
    'FileEvent',
    'MonitorError',
    'InvalidConfiguration',
    'CallbackExecutionFailure',
    'CallbackRegistry',
    'Registration',
    'RegistryEntry',
    'CallbackDispatcher',
    'RegisterCallback',
    'UnRegisterCallback',
    'EventAtPath',
    'MonitorCoordinator',
    'PatternFilter',
    'EventHandler',
    'CoordinatorEventHandler',
    'DirectoryWatcher',
]
