"""Reminder command handlers."""

import logging
from telegram import Update
from telegram.ext import ContextTypes
from telegram.helpers import escape_markdown
from dateutil import parser as date_parser

from nudgy.errors import NudgyError
from nudgy.scheduler.jobs import SERVICE_KEY
from nudgy.services import ReminderService

logger = logging.getLogger(__name__)

USAGE = (
    "Usage: /remind <time> | <times per day> | <name>\n\n"
    "Examples:\n"
    "/remind 09:00 | 3 | Drink water\n"
    "/remind 8pm | 1 | Take vitamins"
)


def get_service(context: ContextTypes.DEFAULT_TYPE) -> ReminderService:
    return context.application.bot_data[SERVICE_KEY]


def format_reminder_list(reminders):
    """Format reminders for display."""
    if not reminders:
        return "No reminders yet. Add one with /remind"

    text = "*Daily Reminders:*\n\n"
    for r in reminders:
        text += f"`{r.id[:8]}` {escape_markdown(r.name)} at {r.time.strftime('%H:%M')} (x{r.repeat_count}/day)\n"
    return text


async def add_reminder(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /remind command."""
    if not context.args:
        await update.message.reply_text(USAGE)
        return

    parts = [p.strip() for p in " ".join(context.args).split("|")]
    if len(parts) < 3:
        await update.message.reply_text(USAGE)
        return

    time_str, count_str, name = parts[0], parts[1], "|".join(parts[2:]).strip()

    try:
        time_of_day = date_parser.parse(time_str).time()
    except (ValueError, OverflowError):
        await update.message.reply_text(f"I couldn't understand the time '{time_str}'")
        return

    try:
        reminder = await get_service(context).add(name, time_of_day, count_str)
    except NudgyError as e:
        await update.message.reply_text(str(e))
        return

    await update.message.reply_text(
        f"Reminder set: {reminder.name}\n"
        f"Starts at {reminder.time.strftime('%H:%M')}, {reminder.repeat_count} time(s) a day\n"
        f"ID: {reminder.id[:8]}"
    )


async def list_reminders(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /reminders command."""
    reminders = get_service(context).list()
    await update.message.reply_text(format_reminder_list(reminders), parse_mode="Markdown")


async def delete_reminder(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /delremind command."""
    if not context.args:
        await update.message.reply_text("Usage: /delremind <id>")
        return

    service = get_service(context)
    prefix = context.args[0].strip()

    # Lists show a short id prefix
    matches = [r for r in service.list() if r.id.startswith(prefix)]
    if not matches:
        await update.message.reply_text(f"Reminder {prefix} not found")
        return
    if len(matches) > 1:
        await update.message.reply_text(f"'{prefix}' matches {len(matches)} reminders, please give more of the ID")
        return

    reminder = matches[0]
    try:
        await service.delete(reminder.id)
    except NudgyError as e:
        await update.message.reply_text(str(e))
        return

    await update.message.reply_text(f"Deleted reminder: {reminder.name}")
