"""Tests for the reminder bot commands and startup job."""

import pytest
from datetime import time
from unittest.mock import AsyncMock, Mock

from dateutil import tz as dateutil_tz

from nudgy.bot.handlers import general, reminders
from nudgy.models import PermissionStatus
from nudgy.scheduler.jobs import (
    BACKEND_KEY,
    GATE_KEY,
    NOTIFICATIONS_KEY,
    SERVICE_KEY,
    on_startup,
)
from nudgy.scheduler import jobs
from nudgy.services import PermissionGate

from conftest import FakePermissionBackend


def make_update():
    update = Mock()
    update.message = Mock()
    update.message.reply_text = AsyncMock()
    return update


def make_context(service, args=None):
    context = Mock()
    context.args = args or []
    context.application.bot_data = {SERVICE_KEY: service}
    return context


def reply_of(update):
    return update.message.reply_text.call_args[0][0]


class TestRemindCommand:

    @pytest.mark.asyncio
    async def test_add_reminder(self, service):
        update = make_update()
        context = make_context(service, "09:30 | 3 | Drink water".split())

        await reminders.add_reminder(update, context)

        (reminder,) = service.list()
        assert reminder.name == "Drink water"
        assert reminder.time == time(9, 30)
        assert reminder.repeat_count == 3
        assert "Reminder set: Drink water" in reply_of(update)

    @pytest.mark.asyncio
    async def test_twelve_hour_time(self, service):
        update = make_update()
        context = make_context(service, "8pm | 1 | Vitamins".split())

        await reminders.add_reminder(update, context)

        assert service.list()[0].time == time(20, 0)

    @pytest.mark.asyncio
    async def test_invalid_count_reports_validation_error(self, service):
        update = make_update()
        context = make_context(service, "09:30 | zero | Drink water".split())

        await reminders.add_reminder(update, context)

        assert service.list() == ()
        assert "Repeat count" in reply_of(update)

    @pytest.mark.asyncio
    async def test_unparseable_time(self, service):
        update = make_update()
        context = make_context(service, "whenever | 1 | Drink water".split())

        await reminders.add_reminder(update, context)

        assert service.list() == ()
        assert "couldn't understand the time" in reply_of(update)

    @pytest.mark.asyncio
    async def test_missing_parts_shows_usage(self, service):
        update = make_update()

        await reminders.add_reminder(update, make_context(service, ["09:30"]))

        assert reply_of(update).startswith("Usage:")


class TestListAndDeleteCommands:

    @pytest.mark.asyncio
    async def test_list_empty(self, service):
        update = make_update()

        await reminders.list_reminders(update, make_context(service))

        assert "No reminders yet" in reply_of(update)

    @pytest.mark.asyncio
    async def test_list_shows_reminders(self, service):
        await service.add("Stretch", time(15, 0), "2")
        update = make_update()

        await reminders.list_reminders(update, make_context(service))

        assert "Stretch at 15:00 (x2/day)" in reply_of(update)

    @pytest.mark.asyncio
    async def test_list_escapes_markdown_in_names(self, service):
        await service.add("take_meds 2*3", time(15, 0), "1")
        update = make_update()

        await reminders.list_reminders(update, make_context(service))

        assert r"take\_meds 2\*3 at 15:00" in reply_of(update)

    @pytest.mark.asyncio
    async def test_delete_by_short_id(self, service):
        reminder = await service.add("Stretch", time(15, 0), "2")
        update = make_update()

        await reminders.delete_reminder(update, make_context(service, [reminder.id[:8]]))

        assert service.list() == ()
        assert "Deleted reminder: Stretch" in reply_of(update)

    @pytest.mark.asyncio
    async def test_delete_unknown(self, service):
        await service.add("Stretch", time(15, 0), "2")
        update = make_update()

        await reminders.delete_reminder(update, make_context(service, ["zzzz"]))

        assert len(service.list()) == 1
        assert "not found" in reply_of(update)


class TestStart:

    @pytest.mark.asyncio
    async def test_start_warns_when_notifications_denied(self, service):
        update = make_update()
        context = make_context(service)
        context.application.bot_data[NOTIFICATIONS_KEY] = False

        await general.start(update, context)

        assert "Notifications are not enabled" in reply_of(update)

    @pytest.mark.asyncio
    async def test_start_without_warning(self, service):
        update = make_update()
        context = make_context(service)
        context.application.bot_data[NOTIFICATIONS_KEY] = True

        await general.start(update, context)

        assert "not enabled" not in reply_of(update)


class TestStartup:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,granted", [
        (PermissionStatus.GRANTED, True),
        (PermissionStatus.DENIED, False),
    ])
    async def test_on_startup(self, service, store, backend, clock, status, granted, monkeypatch):
        monkeypatch.setattr(jobs, "get", lambda key, default=None: default)
        clock.set(10, 0)
        await service.add("Walk", time(11, 0), "1")
        backend.calls.clear()
        backend.authorized = True

        app = Mock()
        app.bot_data = {
            SERVICE_KEY: service,
            BACKEND_KEY: backend,
            GATE_KEY: PermissionGate(FakePermissionBackend(status)),
        }

        await on_startup(app)

        assert app.bot_data[NOTIFICATIONS_KEY] is granted
        assert backend.authorized is granted
        assert len(backend.channels) == (1 if granted else 0)
        # Today's occurrences re-armed from the persisted collection
        assert backend.calls[0] == ("cancel_all",)
        assert [call[1] for call in backend.calls[1:]] == ["Walk"]


class TestDailyRearmJob:

    def _scheduled_time(self, monkeypatch, settings):
        monkeypatch.setattr(jobs, "get", lambda key, default=None: settings.get(key, default))
        app = Mock()

        jobs.setup_scheduler(app)

        assert app.job_queue.run_daily.call_args.kwargs["name"] == "daily_rearm"
        return app.job_queue.run_daily.call_args.kwargs["time"]

    def test_local_zone_follows_dst(self, monkeypatch):
        rearm_at = self._scheduled_time(monkeypatch, {})

        assert rearm_at == time(0, 0, 5, tzinfo=rearm_at.tzinfo)
        # A real local zone, not a fixed offset captured at startup
        assert isinstance(rearm_at.tzinfo, dateutil_tz.tzlocal)

    def test_configured_zone(self, monkeypatch):
        rearm_at = self._scheduled_time(monkeypatch, {
            "timezone": "Europe/Paris",
            "scheduler.daily_rearm_time": "01:30",
        })

        assert (rearm_at.hour, rearm_at.minute, rearm_at.second) == (1, 30, 0)
        assert rearm_at.tzinfo.zone == "Europe/Paris"
