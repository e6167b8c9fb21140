"""Telegram bot interface."""

from .main import create_bot, run_bot

__all__ = ["create_bot", "run_bot"]
