"""Core domain models.

- CanonicalIdentity: provider-agnostic view of an authenticated subject
- User: local account created or refreshed from an OAuth login
- OAuthAccount: link between a provider subject and a local user
- Listing: persisted shape of a listing (category and status are enum-backed columns)
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from marketplace.utils.timestamps import ensure_utc, utc_now

from .enums import ListingCategory, ListingStatus, UserRole


def new_id() -> str:
    """Generate a 36-character UUID string primary key."""
    return str(uuid.uuid4())


class CanonicalIdentity(BaseModel):
    """Identity claims normalized across providers.

    Built once per OAuth callback and consumed immediately by the login flow;
    never persisted as such.
    """

    model_config = ConfigDict(frozen=True)

    provider: str = Field(..., description="Lowercase provider key (google, facebook)")
    subject_id: str = Field(..., min_length=1, description="Provider-scoped stable subject identifier")
    name: Optional[str] = Field(None, description="Display name, if the provider sent one")
    email: Optional[str] = Field(None, description="Email claim, if present")
    image_url: Optional[str] = Field(None, description="Avatar URL, if derivable")


class User(BaseModel):
    """Local marketplace account."""

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3, max_length=190)
    phone: Optional[str] = Field(None, max_length=40)
    role: UserRole = Field(UserRole.MIXTE)
    email_verified: bool = False
    active: bool = True
    last_login_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("name", "email")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Field cannot be empty or whitespace-only")
        return stripped

    @field_validator("last_login_at", "created_at", "updated_at")
    @classmethod
    def normalize_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class OAuthAccount(BaseModel):
    """Provider subject linked to a local user."""

    id: Optional[int] = Field(None, description="Database-assigned identifier")
    user_id: str
    provider: str = Field(..., min_length=1, max_length=40)
    provider_user_id: str = Field(..., min_length=1, max_length=190)
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("provider")
    @classmethod
    def lowercase_provider(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("created_at")
    @classmethod
    def normalize_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class Listing(BaseModel):
    """Listing record as stored; no listing business rules live here."""

    id: str = Field(default_factory=new_id)
    finder_user_id: str
    title: str = Field(..., min_length=1, max_length=180)
    category: ListingCategory
    status: ListingStatus = ListingStatus.ACTIVE
    location_text: str = Field(..., min_length=1, max_length=255)
    found_at: datetime
    description: str
    image_url: Optional[str] = Field(None, max_length=512)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("found_at", "created_at", "updated_at")
    @classmethod
    def normalize_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)
