"""Main Telegram bot setup and runner."""

import logging
import pytz
from telegram.ext import Application, CommandHandler, filters

from nudgy.config import get
from nudgy.db import init_db
from nudgy.notifications.telegram import JobQueueBackend, TelegramPermissionBackend
from nudgy.scheduler import setup_scheduler, on_startup
from nudgy.scheduler.jobs import SERVICE_KEY, BACKEND_KEY, GATE_KEY
from nudgy.services import NotificationScheduler, PermissionGate, ReminderService, ReminderStore
from nudgy.services.scheduler import DEFAULT_TITLE

from .handlers import general, reminders

logger = logging.getLogger(__name__)


def create_bot() -> Application:
    """Create and configure the Telegram bot application."""
    token = get("telegram.bot_token")
    if not token or token == "YOUR_BOT_TOKEN_FROM_BOTFATHER":
        raise ValueError(
            "Telegram bot token not configured. "
            "Get one from @BotFather and add it to config.yaml"
        )

    # Initialize database
    init_db(get("database.path"))

    app = Application.builder().token(token).post_init(on_startup).build()

    authorized_user = get("telegram.authorized_user_id")
    tz_name = get("timezone")

    backend = JobQueueBackend(
        app.job_queue,
        chat_id=authorized_user,
        tz=pytz.timezone(tz_name) if tz_name else None,
    )
    scheduler = NotificationScheduler(
        backend,
        timezone=tz_name,
        title=get("notifications.title", DEFAULT_TITLE),
        channel_id=get("notifications.channel.id", "reminders"),
    )

    app.bot_data[SERVICE_KEY] = ReminderService(ReminderStore(timezone=tz_name), scheduler)
    app.bot_data[BACKEND_KEY] = backend
    app.bot_data[GATE_KEY] = PermissionGate(TelegramPermissionBackend(app.bot, authorized_user))

    # Add security filter to all handlers
    user_filter = filters.User(user_id=authorized_user) if authorized_user else filters.ALL

    app.add_handler(CommandHandler("start", general.start, filters=user_filter))
    app.add_handler(CommandHandler("remind", reminders.add_reminder, filters=user_filter))
    app.add_handler(CommandHandler("reminders", reminders.list_reminders, filters=user_filter))
    app.add_handler(CommandHandler("delremind", reminders.delete_reminder, filters=user_filter))

    app.add_error_handler(error_handler)

    setup_scheduler(app)

    return app


async def error_handler(update, context):
    """Handle errors in the bot."""
    logger.error(f"Update {update} caused error: {context.error}")

    if update and update.effective_message:
        await update.effective_message.reply_text(
            f"An error occurred: {str(context.error)}"
        )


def run_bot():
    """Run the bot."""
    import logging.handlers
    from pathlib import Path

    # Setup logging
    log_file = get("logging.file", "logs/nudgy.log")
    log_level = get("logging.level", "INFO")

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.handlers.TimedRotatingFileHandler(
        log_file,
        when='midnight',
        interval=1,
        backupCount=7
    )
    file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))

    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            file_handler,
            logging.StreamHandler(),
        ],
    )

    logger.info("Starting Nudgy bot...")

    app = create_bot()
    app.run_polling(allowed_updates=["message"])


if __name__ == "__main__":
    run_bot()
