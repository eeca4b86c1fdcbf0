"""Google identity claims."""

from typing import Optional

from .base import IdentityInfo


class GoogleIdentityInfo(IdentityInfo):
    """Identity view over Google OpenID Connect userinfo claims.

    Claim layout:
        sub: stable subject identifier
        name: full display name
        email: primary email
        picture: flat avatar URL
    """

    PROVIDER = "google"

    @property
    def id(self) -> str:
        return self._required_claim("sub")

    @property
    def name(self) -> Optional[str]:
        return self._claim("name")

    @property
    def email(self) -> Optional[str]:
        return self._claim("email")

    @property
    def image_url(self) -> Optional[str]:
        return self._claim("picture")
