"""Tests for OAuth2 login processing."""

import pytest

from marketplace.auth import OAuth2AuthenticationProcessingError, OAuthLoginService
from marketplace.config.models import AuthConfig
from marketplace.domain.enums import UserRole
from marketplace.domain.models import OAuthAccount, User
from marketplace.identity import MissingClaimError, UnsupportedProviderError
from marketplace.persistence.exceptions import DataIntegrityError
from marketplace.persistence.repositories import OAuthAccountRepository, UserRepository


@pytest.fixture
def service(session):
    """Login service with the default policy."""
    return OAuthLoginService(session)


class TestRegistration:
    """Tests for first logins."""

    def test_first_google_login_registers_user(self, service, session, google_claims):
        """Test a new subject creates a user and a provider link."""
        result = service.process_login("google", google_claims)

        assert result.created is True
        assert result.linked is True
        assert result.user.email == "ana.martin@example.com"
        assert result.user.name == "Ana Martin"
        assert result.user.role == UserRole.MIXTE
        assert result.user.email_verified is True
        assert result.user.last_login_at is not None

        links = OAuthAccountRepository(session).list_for_user(result.user.id)
        assert [(link.provider, link.provider_user_id) for link in links] == [
            ("google", "110169484474386276334")
        ]

    def test_identity_is_returned(self, service, facebook_claims):
        """Test the canonical identity accompanies the user."""
        result = service.process_login("facebook", facebook_claims)

        assert result.identity.provider == "facebook"
        assert result.identity.subject_id == "10224587412345678"
        assert result.identity.image_url == "https://platform-lookaside.fbsbx.com/louis.jpg"

    def test_default_role_is_configurable(self, session, google_claims):
        """Test new accounts get the configured role."""
        service = OAuthLoginService(session, AuthConfig(default_role=UserRole.PROPRIETAIRE))

        result = service.process_login("google", google_claims)

        assert result.user.role == UserRole.PROPRIETAIRE

    def test_name_falls_back_to_email_local_part(self, service, google_claims):
        """Test a claim set without a name still registers."""
        del google_claims["name"]

        result = service.process_login("google", google_claims)

        assert result.user.name == "ana.martin"

    def test_email_domain_is_normalized(self, service, google_claims):
        """Test the email is stored in normalized form."""
        google_claims["email"] = "Ana.Martin@Example.COM"

        result = service.process_login("google", google_claims)

        assert result.user.email == "Ana.Martin@example.com"

    def test_mixed_case_provider_id(self, service, facebook_claims):
        """Test the link is stored under the lowercase provider key."""
        result = service.process_login("FACEBOOK", facebook_claims)

        assert result.identity.provider == "facebook"
        assert result.created is True


class TestReturningUsers:
    """Tests for logins of known accounts."""

    def test_second_login_updates_existing_user(self, service, session, google_claims):
        """Test a repeated login refreshes instead of duplicating."""
        first = service.process_login("google", google_claims)

        google_claims["name"] = "Ana Martin-Duval"
        second = service.process_login("google", google_claims)

        assert second.created is False
        assert second.linked is False
        assert second.user.id == first.user.id
        assert second.user.name == "Ana Martin-Duval"
        assert len(OAuthAccountRepository(session).list_for_user(first.user.id)) == 1

    def test_second_provider_links_to_same_account(self, service, session, google_claims, facebook_claims):
        """Test a Facebook login with the same email joins the Google account."""
        first = service.process_login("google", google_claims)

        facebook_claims["email"] = google_claims["email"]
        second = service.process_login("facebook", facebook_claims)

        assert second.created is False
        assert second.linked is True
        assert second.user.id == first.user.id
        providers = [link.provider for link in OAuthAccountRepository(session).list_for_user(first.user.id)]
        assert providers == ["google", "facebook"]

    def test_existing_user_without_link_gets_linked(self, service, session, google_claims):
        """Test an account created elsewhere is linked on first provider login."""
        existing = UserRepository(session).add(User(name="Ana", email="ana.martin@example.com"))

        result = service.process_login("google", google_claims)

        assert result.created is False
        assert result.linked is True
        assert result.user.id == existing.id

    def test_linked_login_without_email_when_optional(self, session, facebook_claims):
        """Test a known subject logs in even if the email claim disappeared."""
        service = OAuthLoginService(session, AuthConfig(require_email=False))
        first = service.process_login("facebook", facebook_claims)

        del facebook_claims["email"]
        second = service.process_login("facebook", facebook_claims)

        assert second.user.id == first.user.id
        assert second.created is False


class TestRejections:
    """Tests for callbacks that cannot become a login."""

    def test_unsupported_provider(self, service, session):
        """Test twitter is rejected with the resolver error as cause."""
        with pytest.raises(OAuth2AuthenticationProcessingError) as exc_info:
            service.process_login("twitter", {"id": "1", "email": "x@example.com"})

        assert exc_info.value.reason == "unsupported_provider"
        assert isinstance(exc_info.value.__cause__, UnsupportedProviderError)
        assert UserRepository(session).get_active_by_email("x@example.com") is None

    def test_missing_subject(self, service, google_claims):
        """Test claims without a subject id are rejected."""
        del google_claims["sub"]

        with pytest.raises(OAuth2AuthenticationProcessingError) as exc_info:
            service.process_login("google", google_claims)

        assert exc_info.value.reason == "invalid_identity"
        assert isinstance(exc_info.value.__cause__, MissingClaimError)

    def test_missing_email_when_required(self, service, session, facebook_claims):
        """Test the default policy refuses logins without email."""
        del facebook_claims["email"]

        with pytest.raises(OAuth2AuthenticationProcessingError) as exc_info:
            service.process_login("facebook", facebook_claims)

        assert exc_info.value.reason == "missing_email"
        assert OAuthAccountRepository(session).get_by_provider_identity("facebook", "10224587412345678") is None

    def test_missing_email_for_unknown_subject(self, session, facebook_claims):
        """Test an optional email is still needed to create an account."""
        service = OAuthLoginService(session, AuthConfig(require_email=False))
        del facebook_claims["email"]

        with pytest.raises(OAuth2AuthenticationProcessingError) as exc_info:
            service.process_login("facebook", facebook_claims)

        assert exc_info.value.reason == "missing_email"

    def test_invalid_email(self, service, google_claims):
        """Test a malformed email claim is rejected."""
        google_claims["email"] = "not-an-email"

        with pytest.raises(OAuth2AuthenticationProcessingError) as exc_info:
            service.process_login("google", google_claims)

        assert exc_info.value.reason == "invalid_email"

    def test_disabled_account(self, service, session, google_claims):
        """Test a linked but deactivated user cannot log in."""
        result = service.process_login("google", google_claims)
        users = UserRepository(session)
        users.update(result.user.model_copy(update={"active": False}))

        with pytest.raises(OAuth2AuthenticationProcessingError) as exc_info:
            service.process_login("google", google_claims)

        assert exc_info.value.reason == "account_disabled"

    def test_email_taken_by_inactive_account(self, service, session, google_claims):
        """Test a unique email clash surfaces as an account conflict."""
        UserRepository(session).add(User(name="Old Ana", email="ana.martin@example.com", active=False))
        session.flush()

        with pytest.raises(OAuth2AuthenticationProcessingError) as exc_info:
            service.process_login("google", google_claims)

        assert exc_info.value.reason == "account_conflict"
        session.rollback()

    def test_rejection_is_logged(self, service, caplog):
        """Test rejected logins emit an auth.login.rejected event."""
        with pytest.raises(OAuth2AuthenticationProcessingError):
            service.process_login("twitter", {"id": "1"})

        events = [getattr(record, "event", None) for record in caplog.records]
        assert "auth.login.rejected" in events


class TestLinkRepository:
    """Tests for the provider link constraint used by the service."""

    def test_subject_cannot_be_linked_twice(self, session):
        """Test (provider, subject) is unique."""
        users = UserRepository(session)
        accounts = OAuthAccountRepository(session)
        first = users.add(User(name="A", email="a@example.com"))
        second = users.add(User(name="B", email="b@example.com"))
        accounts.link(OAuthAccount(user_id=first.id, provider="google", provider_user_id="1"))

        with pytest.raises(DataIntegrityError):
            accounts.link(OAuthAccount(user_id=second.id, provider="Google", provider_user_id="1"))

        session.rollback()
