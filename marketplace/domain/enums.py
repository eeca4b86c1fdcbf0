"""Persisted domain enumerations.

Each member's value is its persisted token: the lowercase string written to
the database and read by the web frontend. Tokens must never change for an
existing member without a data migration.
"""

from enum import Enum, unique


class TokenEnum(str, Enum):
    """Base for enumerations persisted by token.

    Subclasses declare their members and override ``fallback()`` with the
    member returned when a stored token matches nothing.
    """

    @property
    def token(self) -> str:
        return self.value

    @classmethod
    def fallback(cls) -> "TokenEnum":
        raise NotImplementedError(f"{cls.__name__} does not declare a fallback member")

    @classmethod
    def from_token(cls, token: str) -> "TokenEnum":
        """Strict lookup by exact token.

        Raises:
            ValueError: If no member carries this token
        """
        for member in cls:
            if member.value == token:
                return member
        supported = ", ".join(member.value for member in cls)
        raise ValueError(f"Unknown {cls.__name__} token: {token!r}. Supported: {supported}")

    @classmethod
    def is_valid_token(cls, token: object) -> bool:
        """Whether ``token`` (after trimming) names a member. Used for request validation."""
        if not isinstance(token, str):
            return False
        return any(member.value == token.strip() for member in cls)


@unique
class ListingCategory(TokenEnum):
    """Category of a lost/found item listing."""

    CLES = "cles"
    ELECTRONIQUE = "electronique"
    BAGAGERIE = "bagagerie"
    DOCUMENTS = "documents"
    VETEMENTS = "vetements"
    AUTRE = "autre"

    @classmethod
    def fallback(cls) -> "ListingCategory":
        return cls.AUTRE


@unique
class ListingStatus(TokenEnum):
    """Lifecycle status of a listing."""

    ACTIVE = "active"
    RESOLU = "resolved"
    SUSPENDU = "suspended"
    SUPPRIME = "deleted"

    @classmethod
    def fallback(cls) -> "ListingStatus":
        return cls.ACTIVE


@unique
class UserRole(TokenEnum):
    """Marketplace role of an account."""

    RETROUVEUR = "retrouveur"
    PROPRIETAIRE = "proprietaire"
    MIXTE = "mixte"

    @classmethod
    def fallback(cls) -> "UserRole":
        return cls.MIXTE
