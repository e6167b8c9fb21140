"""General bot commands."""

from telegram import Update
from telegram.ext import ContextTypes

from nudgy.scheduler.jobs import NOTIFICATIONS_KEY


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /start command."""
    text = (
        "Hello! I send you daily reminders.\n\n"
        "/remind <time> | <times per day> | <name> - Add a reminder\n"
        "/reminders - List your reminders\n"
        "/delremind <id> - Delete a reminder"
    )

    if not context.application.bot_data.get(NOTIFICATIONS_KEY, True):
        text += "\n\n⚠️ Notifications are not enabled, so reminders won't be delivered."

    await update.message.reply_text(text)
