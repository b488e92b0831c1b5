"""Persistence layer exceptions.

All persistence exceptions inherit from PersistenceError so callers can catch
every database failure with a single except clause.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when database connection or initialization fails."""

    pass


class RecordNotFoundError(PersistenceError):
    """Raised when an operation needs a record that does not exist.

    Optional lookups return None instead.
    """

    pass
