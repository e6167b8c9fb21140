"""Services for the reminder core."""

from .store import ReminderStore
from .scheduler import NotificationScheduler
from .reminders import ReminderService
from .permissions import PermissionGate, configure_notifications

__all__ = ["ReminderStore", "NotificationScheduler", "ReminderService", "PermissionGate", "configure_notifications"]
