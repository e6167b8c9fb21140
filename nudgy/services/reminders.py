"""Reminder lifecycle: the single owner of the reminder collection."""

import asyncio
import logging
import uuid
from datetime import time
from typing import Any, Callable, List, Tuple

from nudgy.errors import PersistenceError, ValidationError
from nudgy.models import Reminder
from nudgy.services.scheduler import NotificationScheduler
from nudgy.services.store import ReminderStore

logger = logging.getLogger(__name__)


def parse_repeat_count(value: Any) -> int:
    """Parse a repeat count given as a base-10 integer string (or int)."""
    if isinstance(value, bool):
        raise ValidationError("Repeat count must be a whole number (1 or more).")
    if isinstance(value, int):
        count = value
    elif isinstance(value, str) and value.strip().isdigit() and value.strip().isascii():
        count = int(value.strip(), 10)
    else:
        raise ValidationError("Repeat count must be a whole number (1 or more).")

    if count < 1:
        raise ValidationError("Repeat count must be 1 or more.")
    return count


class ReminderService:
    """
    Add and delete reminders, keeping the store and the scheduled
    notifications consistent with the in-memory list.

    Mutations are serialized: at most one add/delete is in flight at a time.
    """

    def __init__(
        self,
        store: ReminderStore,
        scheduler: NotificationScheduler,
        id_factory: Callable[[], str] = None,
    ):
        self.store = store
        self.scheduler = scheduler
        self._new_id = id_factory or (lambda: uuid.uuid4().hex)
        self._reminders: List[Reminder] = []
        self._lock = asyncio.Lock()

    async def load(self) -> Tuple[Reminder, ...]:
        """Replace the in-memory list with the persisted collection."""
        async with self._lock:
            self._reminders = self.store.load()
            logger.info(f"Loaded {len(self._reminders)} reminder(s)")
            return tuple(self._reminders)

    def list(self) -> Tuple[Reminder, ...]:
        """Snapshot of the current reminders in insertion order."""
        return tuple(self._reminders)

    def get(self, reminder_id: str):
        for reminder in self._reminders:
            if reminder.id == reminder_id:
                return reminder
        return None

    async def add(self, name: str, time_of_day: time, repeat_count: Any) -> Reminder:
        """
        Create a reminder, persist it and schedule today's occurrences.

        Args:
            name: Display name, must not be blank
            time_of_day: When the first daily occurrence fires
            repeat_count: Number of daily occurrences, as entered (e.g. "3")

        Returns:
            The created reminder

        Raises:
            ValidationError: Invalid name or repeat count
            PersistenceError: The collection could not be saved
        """
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Please enter a reminder name.")
        if not isinstance(time_of_day, time):
            raise ValidationError("Please select a time of day.")
        count = parse_repeat_count(repeat_count)

        async with self._lock:
            reminder = Reminder(
                id=self._allocate_id(),
                name=name.strip(),
                time=time_of_day.replace(microsecond=0, tzinfo=None),
                repeat_count=count,
            )

            previous = self._reminders
            self._reminders = previous + [reminder]
            if not self.store.save(self._reminders):
                self._reminders = previous
                raise PersistenceError("Could not save the reminder. Please try again.")

            logger.info(f"Added reminder {reminder.id} '{reminder.name}' at {reminder.time} x{count}")

            # New reminders are scheduled incrementally; only deletes reschedule everything
            await self.scheduler.schedule_occurrences(reminder)
            return reminder

    async def delete(self, reminder_id: str) -> None:
        """
        Delete a reminder and reschedule the remaining ones.

        Deleting an unknown id does nothing.

        Raises:
            PersistenceError: The collection could not be saved
        """
        async with self._lock:
            previous = self._reminders
            remaining = [r for r in previous if r.id != reminder_id]
            if len(remaining) == len(previous):
                logger.debug(f"Reminder {reminder_id} not found, nothing to delete")
                return

            self._reminders = remaining
            if not self.store.save(self._reminders):
                self._reminders = previous
                raise PersistenceError("Could not delete the reminder. Please try again.")

            logger.info(f"Deleted reminder {reminder_id}")

            await self.scheduler.reschedule_all(list(self._reminders))

    async def rearm(self) -> None:
        """Cancel and re-issue today's occurrences for every reminder."""
        async with self._lock:
            await self.scheduler.reschedule_all(list(self._reminders))

    def _allocate_id(self) -> str:
        live_ids = {r.id for r in self._reminders}
        reminder_id = self._new_id()
        while reminder_id in live_ids:
            reminder_id = self._new_id()
        return reminder_id
