"""Persistence layer for the mail delivery log.

Public API:
    - init_database(database_url) / close_database()
    - get_session() -> ContextManager[Session]
    - MailStatusRepository: delivery record operations
    - PersistenceError and subclasses

Example usage:
    >>> from comment_notifier.persistence import init_database, get_session, MailStatusRepository
    >>> init_database("sqlite:///./data/comment_notifier.db")
    >>> with get_session() as session:
    ...     MailStatusRepository(session).count_by_state()
"""

from .database import close_database, get_engine, get_session, init_database, is_initialized
from .exceptions import DatabaseConnectionError, PersistenceError, RecordNotFoundError
from .repositories import MailStatusRepository

__all__ = [
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    "is_initialized",
    "MailStatusRepository",
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
]
