"""Identity resolution exceptions."""


class IdentityResolutionError(Exception):
    """Base exception for failures turning provider claims into an identity.

    The login flow catches this family and rejects the attempt; none of these
    are ever replaced by a default identity.
    """

    pass


class UnsupportedProviderError(IdentityResolutionError):
    """No identity variant is registered for the provider.

    Attributes:
        provider_id: The identifier exactly as the caller passed it
        supported: Provider keys that would have been accepted
    """

    def __init__(self, provider_id, supported=()) -> None:
        self.provider_id = provider_id
        self.supported = tuple(supported)
        message = f"Unsupported OAuth2 provider: {provider_id!r}"
        if self.supported:
            message += f". Supported providers: {', '.join(self.supported)}"
        super().__init__(message)


class MissingClaimError(IdentityResolutionError):
    """A claim the provider contract guarantees is absent (e.g. the subject id)."""

    def __init__(self, provider: str, claim: str) -> None:
        self.provider = provider
        self.claim = claim
        super().__init__(f"{provider} response is missing required claim '{claim}'")


class InvalidClaimsError(IdentityResolutionError):
    """The claim set is not a mapping."""

    pass
