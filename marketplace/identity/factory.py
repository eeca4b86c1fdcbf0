"""Factory selecting the IdentityInfo variant for a provider."""

from collections.abc import Mapping
from typing import Any, Dict, List, Type

from marketplace.logging import get_logger

from .base import IdentityInfo
from .exceptions import InvalidClaimsError, UnsupportedProviderError
from .facebook import FacebookIdentityInfo
from .google import GoogleIdentityInfo

logger = get_logger(__name__, component="identity")

# To support another provider, add its IdentityInfo subclass here.
IDENTITY_VARIANTS: Dict[str, Type[IdentityInfo]] = {
    GoogleIdentityInfo.PROVIDER: GoogleIdentityInfo,
    FacebookIdentityInfo.PROVIDER: FacebookIdentityInfo,
}


def supported_providers() -> List[str]:
    """Sorted provider keys accepted by resolve_identity_info()."""
    return sorted(IDENTITY_VARIANTS)


def resolve_identity_info(provider_id: str, claims: Mapping[str, Any]) -> IdentityInfo:
    """Build the identity view for ``provider_id`` over ``claims``.

    The provider is matched case-insensitively. The returned instance holds
    its own copy of the claims; ``claims`` is not retained.

    Args:
        provider_id: OAuth2 client registration id (e.g. "google", "FACEBOOK")
        claims: User attributes returned by the provider

    Returns:
        IdentityInfo variant for the provider, with its subject id verified

    Raises:
        UnsupportedProviderError: If no variant is registered for provider_id
        MissingClaimError: If the provider's subject id claim is absent
        InvalidClaimsError: If claims is not a mapping

    Example:
        >>> info = resolve_identity_info("Google", {"sub": "1089", "email": "ana@example.com"})
        >>> info.id, info.email
        ('1089', 'ana@example.com')
    """
    key = provider_id.lower() if isinstance(provider_id, str) else None
    variant = IDENTITY_VARIANTS.get(key) if key else None

    if variant is None:
        logger.warning(
            f"Rejecting unsupported provider {provider_id!r}",
            extra={"event": "identity.resolve.unsupported", "provider": str(provider_id)},
        )
        raise UnsupportedProviderError(provider_id, supported_providers())

    if not isinstance(claims, Mapping):
        raise InvalidClaimsError(
            f"{key} claims must be a mapping, got {type(claims).__name__}"
        )

    info = variant(claims)

    # Fails here, not later in the login flow, when the subject is missing
    subject_id = info.id

    logger.debug(
        "Resolved identity claims",
        extra={
            "event": "identity.resolve.succeeded",
            "provider": key,
            "variant": variant.__name__,
            "has_email": info.email is not None,
            "has_image": info.image_url is not None,
            "subject_length": len(subject_id),
        },
    )
    return info
