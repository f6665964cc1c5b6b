"""Listing lifecycle: create, fetch, owner-only update/availability/delete."""

import logging
import math
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sublease_platform.app.config import Settings
from sublease_platform.domain.errors import DomainRejected, NotFound, NotOwner
from sublease_platform.domain.models import Listing, utcnow
from sublease_platform.domain.schemas import ListingCreate, ListingUpdate

logger = logging.getLogger(__name__)

# Columns that may be cleared through a partial update
_NULLABLE_FIELDS = {"contact_phone"}


def _haversine_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Return the great-circle distance in miles between two lat/lng points."""
    R = 3958.8  # Earth radius in miles
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(dlng / 2) ** 2
    )
    return R * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_to_campus(latitude, longitude, settings: Settings) -> Decimal:
    """Miles from a point to the configured campus, rounded to 0.01."""
    miles = _haversine_miles(
        float(latitude), float(longitude), settings.campus_lat, settings.campus_lng,
    )
    return Decimal(str(miles)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class ListingService:
    """CRUD over listings with an ownership guard on every mutation."""

    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings

    def _check_contact_email(self, email: str) -> None:
        if not email.endswith(self.settings.allowed_email_domain):
            raise DomainRejected(
                f"Contact email must end with {self.settings.allowed_email_domain}"
            )

    async def get(self, listing_id: int) -> Listing:
        listing = await self.db.get(Listing, listing_id)
        if listing is None:
            raise NotFound("Listing not found")
        return listing

    async def _get_owned(self, listing_id: int, caller_id: int) -> Listing:
        listing = await self.get(listing_id)
        if listing.user_id != caller_id:
            logger.warning(
                "User %s attempted to modify listing %s owned by %s",
                caller_id, listing_id, listing.user_id,
            )
            raise NotOwner()
        return listing

    async def create(self, owner_id: int, data: ListingCreate) -> Listing:
        self._check_contact_email(data.contact_email)

        values = data.model_dump()
        if values.get("distance_to_campus") is None:
            # Computed once here; searches only read the stored value
            values["distance_to_campus"] = distance_to_campus(
                data.latitude, data.longitude, self.settings,
            )

        listing = Listing(user_id=owner_id, **values)
        self.db.add(listing)
        await self.db.commit()
        await self.db.refresh(listing)

        logger.info("Created listing %s for user %s", listing.id, owner_id)
        return listing

    async def list_for_owner(self, owner_id: int) -> list[Listing]:
        """All of a member's listings, including unavailable ones, newest first."""
        result = await self.db.execute(
            select(Listing)
            .where(Listing.user_id == owner_id)
            .order_by(Listing.created_at.desc(), Listing.id.desc())
        )
        return list(result.scalars().all())

    async def update(self, listing_id: int, caller_id: int, changes: ListingUpdate) -> Listing:
        listing = await self._get_owned(listing_id, caller_id)

        values = changes.model_dump(exclude_unset=True)
        values = {
            key: value for key, value in values.items()
            if value is not None or key in _NULLABLE_FIELDS
        }
        if "contact_email" in values:
            self._check_contact_email(values["contact_email"])

        for key, value in values.items():
            setattr(listing, key, value)
        listing.updated_at = utcnow()
        await self.db.commit()
        await self.db.refresh(listing)

        logger.info("Updated listing %s fields=%s", listing_id, sorted(values))
        return listing

    async def set_availability(self, listing_id: int, caller_id: int, is_available: bool) -> Listing:
        """Soft delete (``False``) or re-list (``True``)."""
        listing = await self._get_owned(listing_id, caller_id)
        listing.is_available = is_available
        listing.updated_at = utcnow()
        await self.db.commit()
        await self.db.refresh(listing)

        logger.info("Listing %s availability set to %s", listing_id, is_available)
        return listing

    async def delete(self, listing_id: int, caller_id: int) -> None:
        """Hard delete. Favorites and conversations about the listing cascade."""
        listing = await self._get_owned(listing_id, caller_id)
        await self.db.delete(listing)
        await self.db.commit()
        logger.info("Deleted listing %s", listing_id)
