"""Facebook identity claims."""

from typing import Optional

from .base import IdentityInfo


class FacebookIdentityInfo(IdentityInfo):
    """Identity view over a Facebook Graph API ``/me`` response.

    The avatar is nested: ``{"picture": {"data": {"url": ...}}}``. Any level of
    that structure may be missing, in which case image_url is None.
    """

    PROVIDER = "facebook"

    @property
    def id(self) -> str:
        return self._required_claim("id")

    @property
    def name(self) -> Optional[str]:
        return self._claim("name")

    @property
    def email(self) -> Optional[str]:
        return self._claim("email")

    @property
    def image_url(self) -> Optional[str]:
        return self._claim("picture", "data", "url")
