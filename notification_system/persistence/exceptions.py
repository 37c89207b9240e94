"""Persistence layer exceptions.

All persistence exceptions inherit from PersistenceError so callers can catch
every database failure with a single except clause.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when the database cannot be opened or is used before ``open()``.

    Examples:
    - Invalid database URL
    - Database file not accessible
    - Session requested on a closed Database
    """

    pass


class RecordNotFoundError(PersistenceError):
    """Raised when an operation requires a record that does not exist.

    Plain lookups return None instead of raising this.
    """

    pass


class DataIntegrityError(PersistenceError):
    """Raised on a constraint violation, such as a duplicate user email."""

    pass
