"""Persistence layer for the user store.

Public API:
    - Database: explicitly opened/closed engine owner with ``session()``
    - UserRepository: CRUD operations on users
    - PersistenceError and its subclasses

Example usage:
    >>> from notification_system.persistence import Database, UserRepository
    >>>
    >>> database = Database("sqlite:///./data/users.db").open()
    >>> with database.session() as session:
    ...     user = UserRepository(session).add("Ivan", "ivan@example.com")
    >>> database.close()
"""

from .database import Database
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
)
from .repositories import UserRepository

__all__ = [
    "Database",
    "UserRepository",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
]
