"""Nudgy - daily reminders with scheduled notifications."""

__version__ = "1.0.0"
