"""Persistence layer exceptions.

Every persistence failure derives from PersistenceError so callers can catch
the whole family in one clause. Enum token anomalies are deliberately absent:
the codec recovers from them instead of raising.
"""


class PersistenceError(Exception):
    """Base exception for database and repository failures."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Engine creation, connection check or session setup failed.

    Also raised when a session is requested before init_database().
    """

    pass


class RecordNotFoundError(PersistenceError):
    """An operation required a row that does not exist.

    Optional lookups return None instead.
    """

    pass


class DataIntegrityError(PersistenceError):
    """A constraint was violated (duplicate email, duplicate provider link, ...)."""

    pass
