"""Authentication exceptions."""


class OAuth2AuthenticationProcessingError(Exception):
    """An OAuth2 provider callback cannot be turned into a local login.

    Raised for unsupported providers, incomplete or invalid claims, and
    account conflicts. The HTTP layer maps it to a rejected login; no partial
    account is ever left behind.
    """

    def __init__(self, message: str, reason: str = "invalid_identity") -> None:
        super().__init__(message)
        self.reason = reason
