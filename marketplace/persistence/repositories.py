"""Repositories for users, OAuth account links and listings.

Repositories accept and return domain models. SQLAlchemy errors are wrapped in
PersistenceError (or DataIntegrityError for constraint violations).
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import String, select, type_coerce
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.domain.models import Listing, OAuthAccount, User
from marketplace.utils.timestamps import to_storage, utc_now

from .codec import EnumColumn
from .exceptions import DataIntegrityError, PersistenceError, RecordNotFoundError
from .schema import ListingModel, OAuthAccountModel, UserModel

logger = logging.getLogger(__name__)


def find_unknown_tokens(session: Session, column) -> List[str]:
    """Distinct raw values of an enum-backed column that no member claims.

    The column is read as plain text so the codec's fallback does not hide
    the stored value.

    Args:
        session: Active session
        column: ORM attribute whose type is an EnumColumn

    Returns:
        Sorted list of unknown non-blank tokens (empty when the column is clean)
    """
    column_type = column.property.columns[0].type
    if not isinstance(column_type, EnumColumn):
        raise TypeError(f"{column} is not an enum-backed column")

    raw = type_coerce(column, String)
    try:
        stmt = select(raw).where(raw.is_not(None)).distinct()
        values = session.execute(stmt).scalars().all()
    except SQLAlchemyError as e:
        logger.error(f"Error auditing column {column}: {e}", exc_info=True)
        raise PersistenceError(f"Failed to audit column {column}: {e}") from e

    known = column_type.codec.tokens
    return sorted(value for value in values if value.strip() and value.strip() not in known)


class UserRepository:
    """Repository for local user accounts."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, user_id: str) -> Optional[User]:
        try:
            user_model = self.session.get(UserModel, user_id)
            return user_model.to_domain() if user_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve user: {e}") from e

    def get_active_by_email(self, email: str) -> Optional[User]:
        """Look up an active account by exact email.

        Returns:
            User domain model if found, None otherwise
        """
        try:
            stmt = select(UserModel).where(UserModel.email == email, UserModel.active.is_(True))
            user_model = self.session.execute(stmt).scalar_one_or_none()
            return user_model.to_domain() if user_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving user by email: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve user: {e}") from e

    def add(self, user: User) -> User:
        """Insert a new user.

        Raises:
            DataIntegrityError: If the id or email is already taken
            PersistenceError: If database error occurs
        """
        try:
            user_model = UserModel.from_domain(user)
            self.session.add(user_model)
            self.session.flush()
            return user_model.to_domain()
        except IntegrityError as e:
            logger.error(f"Integrity error inserting user {user.id}: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to insert user due to constraint violation: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error inserting user {user.id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to insert user: {e}") from e

    def update(self, user: User) -> User:
        """Overwrite the mutable fields of an existing user and bump updated_at.

        Raises:
            RecordNotFoundError: If the user does not exist
            PersistenceError: If database error occurs
        """
        try:
            existing = self.session.get(UserModel, user.id)
            if existing is None:
                raise RecordNotFoundError(f"User {user.id} not found")

            existing.name = user.name
            existing.phone = user.phone
            existing.role = user.role
            existing.email_verified = user.email_verified
            existing.active = user.active
            existing.last_login_at = to_storage(user.last_login_at)
            existing.updated_at = to_storage(utc_now())

            self.session.flush()
            return existing.to_domain()
        except RecordNotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error updating user {user.id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update user: {e}") from e

    def find_unknown_tokens(self) -> Dict[str, List[str]]:
        """Unknown stored tokens per enum-backed column of the users table."""
        return {"users.role": find_unknown_tokens(self.session, UserModel.role)}


class OAuthAccountRepository:
    """Repository for provider subject -> user links."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_provider_identity(self, provider: str, provider_user_id: str) -> Optional[OAuthAccount]:
        try:
            stmt = select(OAuthAccountModel).where(
                OAuthAccountModel.provider == provider.lower(),
                OAuthAccountModel.provider_user_id == provider_user_id,
            )
            account_model = self.session.execute(stmt).scalar_one_or_none()
            return account_model.to_domain() if account_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving {provider} account link: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve OAuth account: {e}") from e

    def list_for_user(self, user_id: str) -> List[OAuthAccount]:
        try:
            stmt = (
                select(OAuthAccountModel)
                .where(OAuthAccountModel.user_id == user_id)
                .order_by(OAuthAccountModel.id)
            )
            return [model.to_domain() for model in self.session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing OAuth accounts for user {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list OAuth accounts: {e}") from e

    def link(self, account: OAuthAccount) -> OAuthAccount:
        """Insert a provider link.

        Raises:
            DataIntegrityError: If (provider, provider_user_id) is already linked
            PersistenceError: If database error occurs
        """
        try:
            account_model = OAuthAccountModel.from_domain(account)
            self.session.add(account_model)
            self.session.flush()
            return account_model.to_domain()
        except IntegrityError as e:
            logger.error(f"Integrity error linking {account.provider} account: {e}", exc_info=True)
            raise DataIntegrityError(f"OAuth account already linked: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error linking {account.provider} account: {e}", exc_info=True)
            raise PersistenceError(f"Failed to link OAuth account: {e}") from e


class ListingRepository:
    """Storage of listings. Only persistence; no search or listing rules."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, listing_id: str) -> Optional[Listing]:
        try:
            listing_model = self.session.get(ListingModel, listing_id)
            return listing_model.to_domain() if listing_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving listing {listing_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve listing: {e}") from e

    def add(self, listing: Listing) -> Listing:
        try:
            listing_model = ListingModel.from_domain(listing)
            self.session.add(listing_model)
            self.session.flush()
            return listing_model.to_domain()
        except IntegrityError as e:
            logger.error(f"Integrity error inserting listing {listing.id}: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to insert listing due to constraint violation: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error inserting listing {listing.id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to insert listing: {e}") from e

    def find_unknown_tokens(self) -> Dict[str, List[str]]:
        """Unknown stored tokens per enum-backed column of the listings table."""
        return {
            "listings.category": find_unknown_tokens(self.session, ListingModel.category),
            "listings.status": find_unknown_tokens(self.session, ListingModel.status),
        }
