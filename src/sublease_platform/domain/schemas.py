"""Pydantic v2 schemas for API request/response validation.

JSON bodies use camelCase keys (``priceMin``, ``otherUserId``); Python code
uses the snake_case field names.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

PRICE_PATTERN = r"^\d+(\.\d{1,2})?$"


class CamelModel(BaseModel):
    """Base schema: camelCase aliases, accepts either spelling on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _iso_date(value: str) -> str:
    """Validate a calendar date and return it in YYYY-MM-DD form."""
    try:
        return date.fromisoformat(value).isoformat()
    except (TypeError, ValueError):
        raise ValueError("Invalid date format, expected YYYY-MM-DD")


def _bathroom_step(value: Decimal) -> Decimal:
    if (value * 2) % 1 != 0:
        raise ValueError("Bathrooms must be in increments of 0.5")
    return value


def _contact_email(value: str) -> str:
    value = value.strip()
    local, _, domain = value.partition("@")
    if not local or "." not in domain:
        raise ValueError("Invalid email address")
    return value


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class SignUpRequest(CamelModel):
    """Schema for creating a new member account."""

    email: str
    password: str
    name: str


class SignInRequest(CamelModel):
    """Schema for member sign-in."""

    email: str
    password: str


class UserResponse(CamelModel):
    """Public user record (never includes the password hash)."""

    id: int
    uid: str
    email: str
    name: str
    created_at: datetime


class AuthResponse(CamelModel):
    """Bearer token plus the authenticated user."""

    token: str
    token_type: str = "bearer"
    user: UserResponse


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


class _ListingFieldChecks(CamelModel):
    """Field validators shared by create and partial-update payloads."""

    @field_validator("available_from", "available_to", check_fields=False)
    @classmethod
    def check_dates(cls, value):
        return _iso_date(value)

    @field_validator("bathrooms", check_fields=False)
    @classmethod
    def check_bathrooms(cls, value):
        if value is None:
            return value
        return _bathroom_step(value)

    @field_validator("contact_email", check_fields=False)
    @classmethod
    def check_contact_email(cls, value):
        if value is None:
            return value
        return _contact_email(value)


class ListingCreate(_ListingFieldChecks):
    """Schema for posting a new listing."""

    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    price: str = Field(pattern=PRICE_PATTERN)
    bedrooms: int = Field(ge=0, le=10)
    bathrooms: Decimal = Field(ge=Decimal("0.5"), le=10)
    address: str = Field(min_length=1, max_length=500)
    latitude: Decimal = Field(ge=-90, le=90)
    longitude: Decimal = Field(ge=-180, le=180)
    distance_to_campus: Optional[Decimal] = Field(default=None, ge=0, le=50)
    furnished: bool = False
    available_from: str
    available_to: str
    amenities: list[str] = []
    images: list[str] = Field(min_length=1)
    contact_email: str
    contact_phone: Optional[str] = None
    is_available: bool = True


class ListingUpdate(_ListingFieldChecks):
    """Partial update: only fields present in the request body are applied."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1)
    price: Optional[str] = Field(default=None, pattern=PRICE_PATTERN)
    bedrooms: Optional[int] = Field(default=None, ge=0, le=10)
    bathrooms: Optional[Decimal] = Field(default=None, ge=Decimal("0.5"), le=10)
    address: Optional[str] = Field(default=None, min_length=1, max_length=500)
    latitude: Optional[Decimal] = Field(default=None, ge=-90, le=90)
    longitude: Optional[Decimal] = Field(default=None, ge=-180, le=180)
    distance_to_campus: Optional[Decimal] = Field(default=None, ge=0, le=50)
    furnished: Optional[bool] = None
    available_from: Optional[str] = None
    available_to: Optional[str] = None
    amenities: Optional[list[str]] = None
    images: Optional[list[str]] = Field(default=None, min_length=1)
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    is_available: Optional[bool] = None


class AvailabilityUpdate(CamelModel):
    is_available: bool


class ListingResponse(CamelModel):
    """Schema for listing API responses."""

    id: int
    user_id: int
    title: str
    description: str
    price: str
    bedrooms: int
    bathrooms: Decimal
    address: str
    latitude: Decimal
    longitude: Decimal
    distance_to_campus: Decimal
    furnished: bool
    available_from: str
    available_to: str
    amenities: list[str]
    images: list[str]
    contact_email: str
    contact_phone: Optional[str] = None
    is_available: bool
    created_at: datetime
    updated_at: datetime


class MapPin(CamelModel):
    """Projection consumed by the map widget."""

    id: int
    title: str
    latitude: Decimal
    longitude: Decimal
    price: str


# ---------------------------------------------------------------------------
# Favorites
# ---------------------------------------------------------------------------


class FavoriteCreate(CamelModel):
    listing_id: int


class FavoriteStatus(CamelModel):
    listing_id: int
    is_favorited: bool


# ---------------------------------------------------------------------------
# Conversations / Messages
# ---------------------------------------------------------------------------


class ConversationCreate(CamelModel):
    """Get-or-create a conversation with another member."""

    other_user_id: int
    listing_id: Optional[int] = None


class ConversationResponse(CamelModel):
    id: int
    user1_id: int
    user2_id: int
    listing_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class MessageCreate(CamelModel):
    content: str


class MessageResponse(CamelModel):
    id: int
    conversation_id: int
    sender_id: int
    content: str
    created_at: datetime
    read_at: Optional[datetime] = None


class MessageWithSender(MessageResponse):
    sender: UserResponse


class ConversationSummaryResponse(ConversationResponse):
    """Inbox row: the conversation plus the other party, listing and latest message."""

    other_user: UserResponse
    listing: Optional[ListingResponse] = None
    last_message: Optional[MessageResponse] = None
    unread_count: int = 0


class MarkReadResponse(CamelModel):
    updated: int
