from enum import Enum
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Union


class EventType(Enum):
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"

    @classmethod
    def parse(cls, value: Union["EventType", str]) -> "EventType":
        """Accept a member or its value name, e.g. ``"Created"``"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            names = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown event type {value!r} (expected one of: {names})") from None


@dataclass
class FileEvent:
    event_type: EventType
    src_path: Path
    is_directory: bool = False
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self):
        kind = "directory" if self.is_directory else "file"
        return f"{self.event_type.value} {kind}: {self.src_path} at {self.timestamp:%H:%M:%S.%f}"
