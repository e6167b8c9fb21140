"""Notification and permission backends."""

from .backend import (
    DateTrigger,
    NotificationBackend,
    NotificationChannel,
    NotificationContent,
    PermissionBackend,
)

__all__ = [
    "DateTrigger",
    "NotificationBackend",
    "NotificationChannel",
    "NotificationContent",
    "PermissionBackend",
]
