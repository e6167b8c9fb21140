"""Contracts for the host notification and permission systems."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

from nudgy.models import PermissionStatus


@dataclass(frozen=True)
class NotificationContent:
    title: str
    body: str


@dataclass(frozen=True)
class DateTrigger:
    """Fire once at an absolute point in time."""
    fire_at: datetime
    channel_id: Optional[str] = None


@dataclass(frozen=True)
class NotificationChannel:
    """Delivery channel registered once at startup."""
    channel_id: str
    name: str
    importance: str = "high"  # low, default, high
    vibration_pattern: List[int] = field(default_factory=lambda: [0, 250, 250, 250])
    light_color: Optional[str] = None


class NotificationBackend(ABC):
    """Primitive schedule/cancel operations of a local notification system."""

    @abstractmethod
    async def schedule_notification(self, content: NotificationContent, trigger: DateTrigger) -> Optional[Any]:
        """
        Schedule a one-shot notification.

        Returns:
            A backend handle, or None if nothing was scheduled
        """
        pass

    @abstractmethod
    async def cancel_all(self) -> None:
        """Cancel every notification scheduled by this backend."""
        pass

    @abstractmethod
    async def register_channel(self, channel: NotificationChannel) -> None:
        """Register the delivery channel."""
        pass


class PermissionBackend(ABC):
    """Notification authorization as reported by the host."""

    @abstractmethod
    async def get_status(self) -> PermissionStatus:
        pass

    @abstractmethod
    async def request_status(self) -> PermissionStatus:
        """Ask for authorization. May prompt the user."""
        pass
