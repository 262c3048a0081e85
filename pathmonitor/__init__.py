"""
pathmonitor - filesystem event callbacks
"""
from .watch import (
    EventType,
    MonitorCoordinator,
    RegisterCallback,
    UnRegisterCallback,
    EventAtPath,
    InvalidConfiguration,
)

__version__ = "0.1.0"

__all__ = [
    'EventType',
    'MonitorCoordinator',
    'RegisterCallback',
    'UnRegisterCallback',
    'EventAtPath',
    'InvalidConfiguration',
]
