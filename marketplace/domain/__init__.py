"""Domain enumerations and models."""

from .enums import ListingCategory, ListingStatus, TokenEnum, UserRole
from .models import CanonicalIdentity, Listing, OAuthAccount, User

__all__ = [
    "TokenEnum",
    "ListingCategory",
    "ListingStatus",
    "UserRole",
    "CanonicalIdentity",
    "User",
    "OAuthAccount",
    "Listing",
]
