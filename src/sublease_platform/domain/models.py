"""SQLAlchemy ORM models for the sublease marketplace.

All models use SQLite-compatible types:
- Integer autoincrement primary keys (conversation pairs compare ids)
- JSON for tag/image lists (no JSONB)
- DateTime for timestamps, written from Python so ordering keeps sub-second precision
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship

from sublease_platform.infra.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Auth / User
# ---------------------------------------------------------------------------


class User(Base):
    """Verified campus member."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uid = Column(String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    listings = relationship("Listing", back_populates="owner", passive_deletes=True)


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


class Listing(Base):
    """A sublease offer posted by a member.

    ``price`` is kept as a base-10 string ("1200", "950.50") and is only ever
    compared after parsing to ``Decimal``.
    """

    __tablename__ = "listings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(String(20), nullable=False)
    bedrooms = Column(Integer, nullable=False)
    bathrooms = Column(Numeric(3, 1), nullable=False)
    address = Column(String(500), nullable=False)
    latitude = Column(Numeric(10, 8), nullable=False)
    longitude = Column(Numeric(11, 8), nullable=False)
    distance_to_campus = Column(Numeric(5, 2), nullable=False)  # miles
    furnished = Column(Boolean, nullable=False, default=False)
    available_from = Column(String(10), nullable=False)  # ISO date
    available_to = Column(String(10), nullable=False)  # ISO date
    amenities = Column(JSON, nullable=False, default=list)
    images = Column(JSON, nullable=False, default=list)
    contact_email = Column(String(255), nullable=False)
    contact_phone = Column(String(50), nullable=True)
    is_available = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    owner = relationship("User", back_populates="listings")


class Favorite(Base):
    """Saved listing. One row per (user, listing)."""

    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("user_id", "listing_id", name="uq_favorite_user_listing"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    listing_id = Column(Integer, ForeignKey("listings.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    listing = relationship("Listing")


# ---------------------------------------------------------------------------
# Messaging
# ---------------------------------------------------------------------------


class Conversation(Base):
    """Thread between exactly two members, optionally about one listing.

    Stored canonically: ``user1_id < user2_id``. The listing is part of the
    identity, so the same pair has one thread per listing plus one general
    thread with ``listing_id`` NULL.
    """

    __tablename__ = "conversations"
    __table_args__ = (
        CheckConstraint("user1_id < user2_id", name="ck_conversation_canonical_pair"),
        UniqueConstraint("user1_id", "user2_id", "listing_id", name="uq_conversation_pair_listing"),
        # NULLs are distinct in unique constraints, so the general thread needs its own index
        Index(
            "uq_conversation_pair_general",
            "user1_id",
            "user2_id",
            unique=True,
            sqlite_where=text("listing_id IS NULL"),
            postgresql_where=text("listing_id IS NULL"),
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user1_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user2_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    listing_id = Column(Integer, ForeignKey("listings.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    user1 = relationship("User", foreign_keys=[user1_id])
    user2 = relationship("User", foreign_keys=[user2_id])
    listing = relationship("Listing")
    messages = relationship(
        "Message",
        back_populates="conversation",
        passive_deletes=True,
        order_by="Message.created_at",
    )

    def has_participant(self, user_id: int) -> bool:
        return user_id in (self.user1_id, self.user2_id)

    def other_participant(self, user_id: int) -> User:
        """The participant who is not ``user_id``; needs user1 and user2 loaded."""
        return self.user2 if user_id == self.user1_id else self.user1


class Message(Base):
    """A single message in a conversation."""

    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    conversation_id = Column(
        Integer, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    sender_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    read_at = Column(DateTime, nullable=True)

    # Relationships
    conversation = relationship("Conversation", back_populates="messages")
    sender = relationship("User")
