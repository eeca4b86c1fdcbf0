"""Identity claim normalization for OAuth2 providers.

Supported providers:
- Google: google.GoogleIdentityInfo
- Facebook: facebook.FacebookIdentityInfo

Use the factory to pick the variant for a provider callback:
    from marketplace.identity import resolve_identity_info
    info = resolve_identity_info("google", claims)
    info.id, info.name, info.email, info.image_url

Exception handling:
    from marketplace.identity import IdentityResolutionError, UnsupportedProviderError
"""

from .base import IdentityInfo, claim_path
from .exceptions import (
    IdentityResolutionError,
    InvalidClaimsError,
    MissingClaimError,
    UnsupportedProviderError,
)
from .facebook import FacebookIdentityInfo
from .factory import IDENTITY_VARIANTS, resolve_identity_info, supported_providers
from .google import GoogleIdentityInfo

__all__ = [
    # Base and factory
    "IdentityInfo",
    "claim_path",
    "resolve_identity_info",
    "supported_providers",
    "IDENTITY_VARIANTS",
    # Variants
    "GoogleIdentityInfo",
    "FacebookIdentityInfo",
    # Exceptions
    "IdentityResolutionError",
    "UnsupportedProviderError",
    "MissingClaimError",
    "InvalidClaimsError",
]
