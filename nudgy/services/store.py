"""Persistence of the reminder collection under a single settings key."""

import json
import logging
from datetime import date, datetime
from typing import Any, List, Optional, Sequence

import pytz
from dateutil import parser as date_parser
from sqlalchemy.exc import SQLAlchemyError

from nudgy.db import get_session, Setting
from nudgy.models import Reminder

logger = logging.getLogger(__name__)

STORAGE_KEY = "reminders"


class ReminderStore:
    """Load and save the whole reminder collection as one JSON document."""

    def __init__(self, key: str = STORAGE_KEY, timezone: str = None):
        """
        Args:
            key: Settings key holding the collection
            timezone: Zone that zoned stored timestamps are read in; host-local time if omitted
        """
        self.key = key
        self.tz = pytz.timezone(timezone) if timezone else None

    def load(self) -> List[Reminder]:
        """
        Load the persisted reminders.

        Never raises: a missing key, a database error or an unreadable
        document all yield an empty list. Individual records that fail
        validation are skipped.

        Returns:
            Reminders in their persisted order
        """
        try:
            with get_session() as session:
                setting = session.query(Setting).filter_by(key=self.key).first()
                raw = setting.value if setting else None
        except (SQLAlchemyError, RuntimeError) as e:
            logger.error(f"Error loading reminders: {e}")
            return []

        if not raw:
            return []

        try:
            records = json.loads(raw)
        except (ValueError, RecursionError) as e:
            logger.error(f"Stored reminders are not valid JSON, ignoring them: {e}")
            return []

        if not isinstance(records, list):
            logger.error(f"Stored reminders are not a list ({type(records).__name__}), ignoring them")
            return []

        reminders = []
        seen_ids = set()
        for index, record in enumerate(records):
            reminder = self._decode(record)
            if reminder is None:
                logger.warning(f"Quarantined malformed reminder record #{index}: {record!r}")
                continue
            if reminder.id in seen_ids:
                logger.warning(f"Quarantined reminder record #{index} with duplicate id {reminder.id}")
                continue
            seen_ids.add(reminder.id)
            reminders.append(reminder)

        return reminders

    def save(self, reminders: Sequence[Reminder]) -> bool:
        """
        Overwrite the persisted collection.

        Args:
            reminders: The complete collection to persist

        Returns:
            True if the write succeeded
        """
        value = json.dumps([self._encode(r) for r in reminders])

        try:
            with get_session() as session:
                setting = session.query(Setting).filter_by(key=self.key).first()
                if setting:
                    setting.value = value
                else:
                    session.add(Setting(key=self.key, value=value))
        except (SQLAlchemyError, RuntimeError) as e:
            logger.error(f"Error saving reminders: {e}")
            return False

        logger.debug(f"Saved {len(reminders)} reminder(s)")
        return True

    @staticmethod
    def _encode(reminder: Reminder) -> dict:
        timestamp = datetime.combine(date.today(), reminder.time)
        return {
            "id": reminder.id,
            "name": reminder.name,
            "time": timestamp.isoformat(timespec="seconds"),
            "repeatCount": reminder.repeat_count,
        }

    def _decode(self, record: Any) -> Optional[Reminder]:
        if not isinstance(record, dict):
            return None

        reminder_id = record.get("id")
        name = record.get("name")
        stamp = record.get("time")
        repeat_count = record.get("repeatCount")

        if not isinstance(reminder_id, str) or not reminder_id:
            return None
        if not isinstance(name, str) or not name.strip():
            return None
        # bool is an int subclass
        if isinstance(repeat_count, bool) or not isinstance(repeat_count, int) or repeat_count < 1:
            return None
        if not isinstance(stamp, str):
            return None

        try:
            parsed = date_parser.isoparse(stamp)
            # Zoned timestamps (e.g. "...Z") are read in the configured zone
            if parsed.tzinfo is not None:
                parsed = parsed.astimezone(self.tz).replace(tzinfo=None)
        except (ValueError, OverflowError, OSError):
            return None

        # Only the time of day matters; the date is replaced at scheduling time
        time_of_day = parsed.time().replace(microsecond=0)

        return Reminder(id=reminder_id, name=name, time=time_of_day, repeat_count=repeat_count)
