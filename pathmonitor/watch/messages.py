# pathmonitor/watch/messages.py

"""
Requests accepted by MonitorCoordinator.send()
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .events import EventType
from .registry import Callback


@dataclass(frozen=True)
class RegisterCallback:
    """Add callback for event_type at path"""
    event_type: EventType
    recursive: bool
    path: Path
    callback: Callback


@dataclass(frozen=True)
class UnRegisterCallback:
    """Remove every callback for event_type at path"""
    event_type: EventType
    recursive: bool
    path: Path


@dataclass(frozen=True)
class EventAtPath:
    """A filesystem event reported by the watch source"""
    event_type: EventType
    path: Path


Message = Union[RegisterCallback, UnRegisterCallback, EventAtPath]
