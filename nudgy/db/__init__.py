"""Database models and session management."""

from .models import Base, Setting
from .session import get_session, init_db

__all__ = [
    "Base",
    "Setting",
    "get_session",
    "init_db",
]
