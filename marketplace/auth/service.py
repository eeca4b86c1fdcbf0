"""OAuth2 login processing.

Turns a successful provider callback (provider id + claims) into a local
account: resolves the provider identity, then finds, refreshes or registers
the matching user and makes sure the provider subject is linked to it.
Token exchange and session issuance happen elsewhere.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.orm import Session

from marketplace.config.models import AuthConfig
from marketplace.domain.models import CanonicalIdentity, OAuthAccount, User
from marketplace.identity import (
    IdentityResolutionError,
    UnsupportedProviderError,
    resolve_identity_info,
)
from marketplace.logging import get_logger
from marketplace.logging.context import log_context
from marketplace.persistence.exceptions import DataIntegrityError
from marketplace.persistence.repositories import OAuthAccountRepository, UserRepository
from marketplace.utils.timestamps import utc_now

from .exceptions import OAuth2AuthenticationProcessingError

logger = get_logger(__name__, component="auth")


@dataclass(frozen=True)
class LoginResult:
    """Outcome of one processed provider callback."""

    user: User
    identity: CanonicalIdentity
    created: bool
    linked: bool


class OAuthLoginService:
    """Create or update local accounts from OAuth2 provider callbacks.

    Args:
        session: Session of the caller's unit of work; nothing is committed here
        auth_config: Login policy (email requirement, role of new accounts)
    """

    def __init__(self, session: Session, auth_config: Optional[AuthConfig] = None) -> None:
        self.auth_config = auth_config or AuthConfig()
        self.users = UserRepository(session)
        self.accounts = OAuthAccountRepository(session)

    def process_login(self, provider_id: str, claims: Mapping[str, Any]) -> LoginResult:
        """Resolve the provider identity and provision the local account.

        Raises:
            OAuth2AuthenticationProcessingError: If the provider is unsupported,
                the claims are unusable, or the account cannot be provisioned
        """
        with log_context(provider=str(provider_id).lower()):
            try:
                info = resolve_identity_info(provider_id, claims)
            except IdentityResolutionError as e:
                reason = "unsupported_provider" if isinstance(e, UnsupportedProviderError) else "invalid_identity"
                self._reject(str(e), reason)
                raise OAuth2AuthenticationProcessingError(str(e), reason=reason) from e

            identity = info.to_canonical()
            email = self._normalize_email(identity.email)

            if email is None and self.auth_config.require_email:
                self._reject("no email claim", "missing_email")
                raise OAuth2AuthenticationProcessingError(
                    "Email not found in OAuth2 provider response", reason="missing_email"
                )

            link = self.accounts.get_by_provider_identity(identity.provider, identity.subject_id)
            user = self._linked_user(link)

            if user is None and email is None:
                self._reject("no email claim and no existing link", "missing_email")
                raise OAuth2AuthenticationProcessingError(
                    "Email not found in OAuth2 provider response", reason="missing_email"
                )

            if user is None:
                user = self.users.get_active_by_email(email)

            created = user is None
            try:
                if created:
                    user = self._register(identity, email)
                else:
                    user = self._refresh(user, identity)

                linked = False
                if link is None:
                    self.accounts.link(
                        OAuthAccount(
                            user_id=user.id,
                            provider=identity.provider,
                            provider_user_id=identity.subject_id,
                        )
                    )
                    linked = True
            except DataIntegrityError as e:
                self._reject("account conflict", "account_conflict")
                raise OAuth2AuthenticationProcessingError(
                    "Account could not be provisioned for this login", reason="account_conflict"
                ) from e

            logger.info(
                "OAuth2 login processed",
                extra={
                    "event": "auth.login.registered" if created else "auth.login.updated",
                    "user_id": user.id,
                    "linked": linked,
                },
            )
            return LoginResult(user=user, identity=identity, created=created, linked=linked)

    def _linked_user(self, link: Optional[OAuthAccount]) -> Optional[User]:
        if link is None:
            return None

        user = self.users.get_by_id(link.user_id)
        if user is not None and not user.active:
            self._reject("linked account is disabled", "account_disabled")
            raise OAuth2AuthenticationProcessingError(
                "This account has been disabled", reason="account_disabled"
            )
        return user

    def _register(self, identity: CanonicalIdentity, email: str) -> User:
        user = User(
            name=identity.name or email.split("@", 1)[0],
            email=email,
            role=self.auth_config.default_role,
            email_verified=True,
            active=True,
            last_login_at=utc_now(),
        )
        return self.users.add(user)

    def _refresh(self, user: User, identity: CanonicalIdentity) -> User:
        changes = {"last_login_at": utc_now()}
        if identity.name:
            changes["name"] = identity.name
        return self.users.update(user.model_copy(update=changes))

    def _normalize_email(self, email: Optional[str]) -> Optional[str]:
        if email is None:
            return None
        try:
            return validate_email(email, check_deliverability=False).normalized
        except EmailNotValidError as e:
            self._reject("invalid email claim", "invalid_email")
            raise OAuth2AuthenticationProcessingError(
                f"Invalid email in OAuth2 provider response: {e}", reason="invalid_email"
            ) from e

    @staticmethod
    def _reject(detail: str, reason: str) -> None:
        logger.warning(
            f"OAuth2 login rejected: {detail}",
            extra={"event": "auth.login.rejected", "reason": reason},
        )
