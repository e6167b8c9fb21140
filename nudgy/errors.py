"""Exceptions raised by the reminder core."""


class NudgyError(Exception):
    """Base class for reminder errors reported to the caller."""


class ValidationError(NudgyError):
    """Invalid reminder input. Nothing was changed."""


class PersistenceError(NudgyError):
    """The reminder collection could not be written. The change was rolled back."""
