"""Scheduled jobs."""

from .jobs import setup_scheduler, on_startup

__all__ = ["setup_scheduler", "on_startup"]
