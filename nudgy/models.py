"""Domain models."""

import enum
from dataclasses import dataclass
from datetime import time


class PermissionStatus(enum.Enum):
    GRANTED = "granted"
    DENIED = "denied"
    UNDETERMINED = "undetermined"


@dataclass(frozen=True)
class Reminder:
    """A named daily reminder firing `repeat_count` times, one hour apart, from `time`."""
    id: str
    name: str
    time: time
    repeat_count: int

    def __repr__(self):
        return f"<Reminder(id={self.id}, name='{self.name[:30]}', time={self.time}, x{self.repeat_count})>"
