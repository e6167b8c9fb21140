"""Telegram-backed notification and permission backends.

Notifications are one-shot jobs on the application's JobQueue that send a
chat message to the configured user when they fire.
"""

import logging
import uuid
from typing import Optional

from telegram import Bot
from telegram.error import TelegramError
from telegram.ext import ContextTypes, JobQueue
from telegram.helpers import escape_markdown

from nudgy.models import PermissionStatus
from nudgy.notifications.backend import (
    DateTrigger,
    NotificationBackend,
    NotificationChannel,
    NotificationContent,
    PermissionBackend,
)

logger = logging.getLogger(__name__)

JOB_PREFIX = "notification:"


class JobQueueBackend(NotificationBackend):
    """Schedule notifications as JobQueue jobs delivering a chat message."""

    def __init__(self, job_queue: JobQueue, chat_id: int, tz=None):
        """
        Args:
            job_queue: The application's job queue
            chat_id: Chat receiving the notifications
            tz: pytz timezone used for naive fire times; host-local time otherwise
        """
        self.job_queue = job_queue
        self.chat_id = chat_id
        self.tz = tz
        self.channel: Optional[NotificationChannel] = None
        # Set from the permission check at startup
        self.authorized = True

    async def schedule_notification(self, content: NotificationContent, trigger: DateTrigger) -> Optional[str]:
        if not self.authorized:
            logger.debug(f"Notifications not authorized, dropping '{content.body}' at {trigger.fire_at}")
            return None

        when = trigger.fire_at
        if when.tzinfo is None:
            # The job queue reads naive times as UTC
            when = self.tz.localize(when) if self.tz is not None else when.astimezone()

        name = f"{JOB_PREFIX}{uuid.uuid4().hex}"
        self.job_queue.run_once(
            self._deliver,
            when=when,
            data=content,
            name=name,
            chat_id=self.chat_id,
        )
        logger.debug(f"Queued {name} for {when}")
        return name

    async def cancel_all(self) -> None:
        jobs = [job for job in self.job_queue.jobs() if job.name and job.name.startswith(JOB_PREFIX)]
        for job in jobs:
            job.schedule_removal()
        logger.info(f"Cancelled {len(jobs)} scheduled notification(s)")

    async def register_channel(self, channel: NotificationChannel) -> None:
        self.channel = channel
        logger.info(f"Registered notification channel '{channel.channel_id}' ({channel.importance})")

    async def _deliver(self, context: ContextTypes.DEFAULT_TYPE):
        content: NotificationContent = context.job.data
        silent = self.channel is not None and self.channel.importance == "low"

        try:
            await context.bot.send_message(
                chat_id=context.job.chat_id,
                text=f"🔔 *{escape_markdown(content.title)}*\n\n{escape_markdown(content.body)}",
                parse_mode="Markdown",
                disable_notification=silent,
            )
            logger.info(f"Delivered notification {context.job.name}")
        except TelegramError as e:
            logger.error(f"Failed to deliver notification {context.job.name}: {e}")


class TelegramPermissionBackend(PermissionBackend):
    """Notifications are authorized when the bot can reach the configured chat."""

    def __init__(self, bot: Bot, chat_id: Optional[int]):
        self.bot = bot
        self.chat_id = chat_id
        self._status = PermissionStatus.UNDETERMINED

    async def get_status(self) -> PermissionStatus:
        return self._status

    async def request_status(self) -> PermissionStatus:
        if not self.chat_id:
            logger.warning("telegram.authorized_user_id is not configured")
            self._status = PermissionStatus.DENIED
            return self._status

        try:
            await self.bot.get_chat(chat_id=self.chat_id)
            self._status = PermissionStatus.GRANTED
        except TelegramError as e:
            logger.warning(f"Cannot reach chat {self.chat_id}: {e}")
            self._status = PermissionStatus.DENIED

        return self._status
