"""Translate reminders into notification backend calls."""

import logging
from datetime import datetime, time, timedelta
from typing import Any, Callable, Iterable, List

import pytz

from nudgy.models import Reminder
from nudgy.notifications.backend import DateTrigger, NotificationBackend, NotificationContent

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Reminder"
OCCURRENCE_SPACING = timedelta(hours=1)


class NotificationScheduler:
    """Compute today's remaining occurrences of reminders and schedule them."""

    def __init__(
        self,
        backend: NotificationBackend,
        timezone: str = None,
        clock: Callable[[], datetime] = None,
        title: str = DEFAULT_TITLE,
        channel_id: str = None,
    ):
        """
        Args:
            backend: Notification backend receiving schedule/cancel calls
            timezone: Optional zone name (e.g. "America/Montreal"); host-local time if omitted
            clock: Returns the current instant; defaults to the system clock
            title: Title of every notification
            channel_id: Channel attached to every trigger
        """
        self.backend = backend
        self.tz = pytz.timezone(timezone) if timezone else None
        self._clock = clock
        self.title = title
        self.channel_id = channel_id

    def now(self) -> datetime:
        if self._clock is not None:
            return self._clock()
        return datetime.now(self.tz) if self.tz else datetime.now()

    def occurrences(self, reminder: Reminder, now: datetime = None) -> List[datetime]:
        """Fire times of a reminder still ahead of `now` today."""
        now = now or self.now()
        first = self._today_at(now, reminder.time)

        times = []
        for i in range(reminder.repeat_count):
            fire_at = first + i * OCCURRENCE_SPACING
            if self.tz is not None and fire_at.tzinfo is not None:
                fire_at = self.tz.normalize(fire_at)
            if fire_at > now:
                times.append(fire_at)
        return times

    async def schedule_occurrences(self, reminder: Reminder) -> List[Any]:
        """
        Schedule today's remaining occurrences of a reminder.

        Past occurrences are skipped. A failing backend call is logged and
        the next occurrence is still attempted.

        Returns:
            Handles of the notifications the backend accepted
        """
        content = NotificationContent(title=self.title, body=reminder.name)
        handles = []

        for fire_at in self.occurrences(reminder):
            try:
                handle = await self.backend.schedule_notification(
                    content, DateTrigger(fire_at=fire_at, channel_id=self.channel_id)
                )
            except Exception as e:
                logger.error(f"Failed to schedule reminder {reminder.id} at {fire_at}: {e}")
                continue

            if handle is not None:
                handles.append(handle)

        logger.info(f"Scheduled {len(handles)} notification(s) for reminder {reminder.id}")
        return handles

    async def reschedule_all(self, reminders: Iterable[Reminder]) -> None:
        """Cancel everything on the backend, then schedule each reminder in order."""
        try:
            await self.backend.cancel_all()
        except Exception as e:
            logger.error(f"Failed to cancel scheduled notifications: {e}")

        count = 0
        for reminder in reminders:
            await self.schedule_occurrences(reminder)
            count += 1

        logger.info(f"Rescheduled notifications for {count} reminder(s)")

    def _today_at(self, now: datetime, time_of_day: time) -> datetime:
        naive = datetime.combine(now.date(), time_of_day.replace(tzinfo=None))
        if now.tzinfo is None:
            return naive
        if self.tz is not None:
            return self.tz.localize(naive)
        return naive.replace(tzinfo=now.tzinfo)
