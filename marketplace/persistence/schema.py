"""Database schema definition and ORM models.

ORM models convert to and from the pydantic domain models; repositories never
hand ORM objects to callers. Enum-backed columns go through EnumColumn so the
stored value is always the member's token.
"""

import logging

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text, UniqueConstraint, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from marketplace.domain.enums import ListingCategory, ListingStatus, UserRole
from marketplace.domain.models import Listing, OAuthAccount, User
from marketplace.utils.timestamps import from_storage, to_storage

from .codec import EnumColumn, EnumColumnCodec

logger = logging.getLogger(__name__)

Base = declarative_base()

# One codec per persisted enumeration type
LISTING_CATEGORY_CODEC = EnumColumnCodec(ListingCategory)
LISTING_STATUS_CODEC = EnumColumnCodec(ListingStatus)
USER_ROLE_CODEC = EnumColumnCodec(UserRole)


class UserModel(Base):
    """ORM model for the users table."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, nullable=False)
    name = Column(String(120), nullable=False)
    email = Column(String(190), nullable=False, unique=True)
    phone = Column(String(40), nullable=True)
    role = Column(EnumColumn(USER_ROLE_CODEC, length=20), nullable=False)
    email_verified = Column(Boolean, nullable=False, default=False)
    active = Column(Boolean, nullable=False, default=True)

    # Timestamps (stored as ISO 8601 strings)
    last_login_at = Column(String(50), nullable=True)
    created_at = Column(String(50), nullable=False)
    updated_at = Column(String(50), nullable=False)

    __table_args__ = (Index("idx_users_active_email", "active", "email"),)

    def to_domain(self) -> User:
        return User(
            id=self.id,
            name=self.name,
            email=self.email,
            phone=self.phone,
            role=self.role,
            email_verified=self.email_verified,
            active=self.active,
            last_login_at=from_storage(self.last_login_at),
            created_at=from_storage(self.created_at),
            updated_at=from_storage(self.updated_at),
        )

    @classmethod
    def from_domain(cls, user: User) -> "UserModel":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            role=user.role,
            email_verified=user.email_verified,
            active=user.active,
            last_login_at=to_storage(user.last_login_at),
            created_at=to_storage(user.created_at),
            updated_at=to_storage(user.updated_at),
        )


class OAuthAccountModel(Base):
    """ORM model for the oauth_accounts table.

    One row per (provider, provider subject); a user may hold several.
    """

    __tablename__ = "oauth_accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    provider = Column(String(40), nullable=False)
    provider_user_id = Column(String(190), nullable=False)
    created_at = Column(String(50), nullable=False)

    __table_args__ = (
        UniqueConstraint("provider", "provider_user_id", name="ux_oauth_provider_user"),
        Index("idx_oauth_user", "user_id"),
    )

    def to_domain(self) -> OAuthAccount:
        return OAuthAccount(
            id=self.id,
            user_id=self.user_id,
            provider=self.provider,
            provider_user_id=self.provider_user_id,
            created_at=from_storage(self.created_at),
        )

    @classmethod
    def from_domain(cls, account: OAuthAccount) -> "OAuthAccountModel":
        return cls(
            id=account.id,
            user_id=account.user_id,
            provider=account.provider,
            provider_user_id=account.provider_user_id,
            created_at=to_storage(account.created_at),
        )


class ListingModel(Base):
    """ORM model for the listings table."""

    __tablename__ = "listings"

    id = Column(String(36), primary_key=True, nullable=False)
    finder_user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    title = Column(String(180), nullable=False)
    category = Column(EnumColumn(LISTING_CATEGORY_CODEC, length=50), nullable=False)
    status = Column(EnumColumn(LISTING_STATUS_CODEC, length=20), nullable=False)
    location_text = Column(String(255), nullable=False)
    found_at = Column(String(50), nullable=False)
    description = Column(Text, nullable=False)
    image_url = Column(String(512), nullable=True)
    created_at = Column(String(50), nullable=False)
    updated_at = Column(String(50), nullable=False)

    __table_args__ = (
        Index("idx_listings_finder", "finder_user_id"),
        Index("idx_listings_category", "category"),
        Index("idx_listings_status", "status"),
        Index("idx_listings_found_at", "found_at"),
    )

    def to_domain(self) -> Listing:
        return Listing(
            id=self.id,
            finder_user_id=self.finder_user_id,
            title=self.title,
            category=self.category,
            status=self.status,
            location_text=self.location_text,
            found_at=from_storage(self.found_at),
            description=self.description,
            image_url=self.image_url,
            created_at=from_storage(self.created_at),
            updated_at=from_storage(self.updated_at),
        )

    @classmethod
    def from_domain(cls, listing: Listing) -> "ListingModel":
        return cls(
            id=listing.id,
            finder_user_id=listing.finder_user_id,
            title=listing.title,
            category=listing.category,
            status=listing.status,
            location_text=listing.location_text,
            found_at=to_storage(listing.found_at),
            description=listing.description,
            image_url=listing.image_url,
            created_at=to_storage(listing.created_at),
            updated_at=to_storage(listing.updated_at),
        )


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes that don't exist yet (idempotent)."""
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)
        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")
    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
