"""Persistence layer: enum column codec, schema, sessions and repositories.

Public API:
    # Enum column codec
    - EnumColumnCodec: member <-> persisted token mapping for one enum type
    - EnumColumn: SQLAlchemy column type that applies a codec

    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None
    - get_engine() -> Engine

    # Repository classes
    - UserRepository, OAuthAccountRepository, ListingRepository

Example usage:
    >>> from marketplace.persistence import init_database, get_session, ListingRepository
    >>> init_database("sqlite:///./data/marketplace.db")
    >>> with get_session() as session:
    ...     anomalies = ListingRepository(session).find_unknown_tokens()
"""

from .codec import EnumColumn, EnumColumnCodec
from .database import close_database, get_engine, get_session, init_database
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
)
from .repositories import ListingRepository, OAuthAccountRepository, UserRepository
from .schema import LISTING_CATEGORY_CODEC, LISTING_STATUS_CODEC, USER_ROLE_CODEC

__all__ = [
    # Codec
    "EnumColumnCodec",
    "EnumColumn",
    "LISTING_CATEGORY_CODEC",
    "LISTING_STATUS_CODEC",
    "USER_ROLE_CODEC",
    # Database functions
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    # Repositories
    "UserRepository",
    "OAuthAccountRepository",
    "ListingRepository",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
]
