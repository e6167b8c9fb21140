"""Startup and daily jobs that keep today's notifications armed."""

import logging
from datetime import time

import pytz
from dateutil import tz as dateutil_tz
from telegram.ext import Application, ContextTypes

from nudgy.config import get
from nudgy.notifications.backend import NotificationChannel
from nudgy.services import configure_notifications

logger = logging.getLogger(__name__)

SERVICE_KEY = "reminder_service"
BACKEND_KEY = "notification_backend"
GATE_KEY = "permission_gate"
NOTIFICATIONS_KEY = "notifications_granted"


def channel_from_config() -> NotificationChannel:
    """Build the notification channel from the `notifications.channel` section."""
    return NotificationChannel(
        channel_id=get("notifications.channel.id", "reminders"),
        name=get("notifications.channel.name", "Reminders"),
        importance=get("notifications.channel.importance", "high"),
        vibration_pattern=list(get("notifications.channel.vibration_pattern", [0, 250, 250, 250])),
        light_color=get("notifications.channel.light_color", "#FF231F7C"),
    )


async def on_startup(app: Application):
    """Load reminders, check permission once, and arm today's notifications."""
    service = app.bot_data[SERVICE_KEY]
    backend = app.bot_data[BACKEND_KEY]

    await service.load()

    granted = await configure_notifications(app.bot_data[GATE_KEY], backend, channel_from_config())
    backend.authorized = granted
    app.bot_data[NOTIFICATIONS_KEY] = granted

    await service.rearm()
    logger.info(f"Startup complete ({len(service.list())} reminder(s), notifications {'on' if granted else 'off'})")


async def rearm_reminders(context: ContextTypes.DEFAULT_TYPE):
    """Re-issue today's occurrences for every reminder."""
    try:
        await context.application.bot_data[SERVICE_KEY].rearm()
    except Exception as e:
        logger.error(f"Error re-arming reminders: {e}")


def setup_scheduler(app: Application):
    """Set up the daily re-arm job."""
    rearm_time = get("scheduler.daily_rearm_time", "00:00:05")
    hour, minute, second = (list(map(int, str(rearm_time).split(":"))) + [0, 0])[:3]

    tz_name = get("timezone")
    tz = pytz.timezone(tz_name) if tz_name else dateutil_tz.tzlocal()

    app.job_queue.run_daily(
        rearm_reminders,
        time=time(hour=hour, minute=minute, second=second, tzinfo=tz),
        name="daily_rearm",
    )

    logger.info(f"Daily re-arm scheduled for {rearm_time} {tz_name or 'local time'}")
