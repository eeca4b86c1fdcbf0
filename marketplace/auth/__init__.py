"""OAuth2 login processing on top of identity resolution."""

from .exceptions import OAuth2AuthenticationProcessingError
from .service import LoginResult, OAuthLoginService

__all__ = [
    "OAuthLoginService",
    "LoginResult",
    "OAuth2AuthenticationProcessingError",
]
