"""Base class for provider identity views.

Each identity provider returns its own claim layout. An IdentityInfo variant
knows one layout and exposes the same four accessors for all of them:
``id``, ``name``, ``email`` and ``image_url``.
"""

import copy
from abc import ABC, abstractmethod
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Optional

from marketplace.domain.models import CanonicalIdentity

from .exceptions import InvalidClaimsError, MissingClaimError


def claim_path(claims: Mapping, *keys: str) -> Optional[str]:
    """Follow ``keys`` through nested mappings and return a string leaf.

    Any missing key, non-mapping intermediate level, or unusable leaf yields
    None instead of raising. Strings are stripped (blank becomes None);
    integers are rendered as strings; every other leaf type is rejected.

    Example:
        >>> claim_path({"picture": {"data": {"url": "https://x/y.png"}}}, "picture", "data", "url")
        'https://x/y.png'
        >>> claim_path({"picture": "https://x/y.png"}, "picture", "data", "url") is None
        True
    """
    node: Any = claims
    for key in keys:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
        if node is None:
            return None

    if isinstance(node, bool):
        return None
    if isinstance(node, int):
        return str(node)
    if isinstance(node, str):
        return node.strip() or None
    return None


class IdentityInfo(ABC):
    """Read-only view over one provider's claims.

    The claims are deep-copied on construction, so the instance never holds a
    reference into the caller's mapping and nothing can mutate its view.

    Subclasses set PROVIDER and implement the four accessors.
    """

    PROVIDER: str = ""

    def __init__(self, claims: Mapping[str, Any]) -> None:
        if not isinstance(claims, Mapping):
            raise InvalidClaimsError(
                f"{self.PROVIDER or type(self).__name__} claims must be a mapping, got {type(claims).__name__}"
            )
        self._claims = MappingProxyType(copy.deepcopy(dict(claims)))

    @property
    def claims(self) -> Mapping[str, Any]:
        """The raw claims, read-only."""
        return self._claims

    @property
    @abstractmethod
    def id(self) -> str:
        """Provider-scoped subject identifier.

        Raises:
            MissingClaimError: If the provider omitted it
        """

    @property
    @abstractmethod
    def name(self) -> Optional[str]:
        """Display name, or None."""

    @property
    @abstractmethod
    def email(self) -> Optional[str]:
        """Email address, or None."""

    @property
    @abstractmethod
    def image_url(self) -> Optional[str]:
        """Avatar URL, or None when the claim structure doesn't provide one."""

    def _claim(self, *keys: str) -> Optional[str]:
        return claim_path(self._claims, *keys)

    def _required_claim(self, *keys: str) -> str:
        value = claim_path(self._claims, *keys)
        if value is None:
            raise MissingClaimError(self.PROVIDER, ".".join(keys))
        return value

    def to_canonical(self) -> CanonicalIdentity:
        """Snapshot the four accessors into a CanonicalIdentity."""
        return CanonicalIdentity(
            provider=self.PROVIDER,
            subject_id=self.id,
            name=self.name,
            email=self.email,
            image_url=self.image_url,
        )

    def __repr__(self) -> str:
        # claims may carry personal data; keep them out of reprs and logs
        return f"{type(self).__name__}(provider={self.PROVIDER!r})"
