"""Notification permission handling."""

import logging

from nudgy.models import PermissionStatus
from nudgy.notifications.backend import NotificationBackend, NotificationChannel, PermissionBackend

logger = logging.getLogger(__name__)


class PermissionGate:
    """Boolean view over the host's notification authorization."""

    def __init__(self, backend: PermissionBackend):
        self.backend = backend

    async def ensure_granted(self) -> bool:
        """Return True if notifications are authorized, asking for it if needed."""
        status = await self.backend.get_status()
        if status != PermissionStatus.GRANTED:
            status = await self.backend.request_status()
        return status == PermissionStatus.GRANTED


async def configure_notifications(
    gate: PermissionGate,
    backend: NotificationBackend,
    channel: NotificationChannel,
) -> bool:
    """
    Startup routine: check authorization once and register the channel.

    Scheduling is not blocked by a denial; the backend's calls simply
    have no effect.

    Returns:
        False if notifications were denied
    """
    if not await gate.ensure_granted():
        logger.warning("Notification permission denied; reminders will not be delivered")
        return False

    try:
        await backend.register_channel(channel)
    except Exception as e:
        logger.error(f"Failed to register notification channel '{channel.channel_id}': {e}")

    return True
