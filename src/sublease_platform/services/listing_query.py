"""Listing Query Engine.

Translates a filter set into the ordered list of available listings:

1. ``is_available`` is always required.
2. Bedrooms, bathrooms, furnished and distance are evaluated by the store.
3. Rows come back newest first (``created_at DESC``, then ``id DESC``).
4. Price bounds, amenity containment, availability window and free text are
   applied in memory. Price is a decimal string, so it is compared only
   after parsing to ``Decimal``; "9.00" vs "10.00" must not compare lexically.
5. A requested sort is a stable re-sort of that same result set.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sublease_platform.domain.enums import ListingSort
from sublease_platform.domain.errors import InvalidFilter
from sublease_platform.domain.models import Listing

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"true", "1", "yes"}
_FALSE_VALUES = {"false", "0", "no"}


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

def parse_price(value: str) -> Decimal:
    """Parse a stored monetary string. Raises ``InvalidOperation`` on garbage."""
    return Decimal(str(value).strip())


def _decimal(name: str, raw: Optional[str]) -> Optional[Decimal]:
    if raw is None or raw.strip() == "":
        return None
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        raise InvalidFilter(f"{name} must be a number")
    if not value.is_finite():
        raise InvalidFilter(f"{name} must be a finite number")
    if value < 0:
        raise InvalidFilter(f"{name} cannot be negative")
    return value


def _integer(name: str, raw: Optional[str]) -> Optional[int]:
    if raw is None or raw.strip() == "":
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        raise InvalidFilter(f"{name} must be a whole number")
    if value < 0:
        raise InvalidFilter(f"{name} cannot be negative")
    return value


def _boolean(name: str, raw: Optional[str]) -> Optional[bool]:
    if raw is None or raw.strip() == "":
        return None
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise InvalidFilter(f"{name} must be true or false")


def _date(name: str, raw: Optional[str]) -> Optional[date]:
    if raw is None or raw.strip() == "":
        return None
    try:
        return date.fromisoformat(raw.strip())
    except ValueError:
        raise InvalidFilter(f"{name} must be a YYYY-MM-DD date")


def _tags(raw: Optional[str]) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(tag.strip() for tag in raw.split(",") if tag.strip())


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ListingFilters:
    """Search constraints. ``None`` (or an empty amenity tuple) means unconstrained.

    Zero and ``False`` are real values: ``bedrooms_min=0`` is ">= 0" and
    ``furnished=False`` selects unfurnished listings only.
    """

    price_min: Optional[Decimal] = None
    price_max: Optional[Decimal] = None
    bedrooms_min: Optional[int] = None
    bathrooms_min: Optional[Decimal] = None
    distance_max: Optional[Decimal] = None
    furnished: Optional[bool] = None
    amenities: tuple[str, ...] = ()
    available_from: Optional[date] = None
    available_to: Optional[date] = None
    text: Optional[str] = None
    sort: ListingSort = ListingSort.NEWEST

    def __post_init__(self):
        if (
            self.price_min is not None
            and self.price_max is not None
            and self.price_min > self.price_max
        ):
            raise InvalidFilter("priceMin cannot exceed priceMax")

    @classmethod
    def from_query(
        cls,
        *,
        price_min: Optional[str] = None,
        price_max: Optional[str] = None,
        bedrooms: Optional[str] = None,
        bathrooms: Optional[str] = None,
        distance_max: Optional[str] = None,
        furnished: Optional[str] = None,
        amenities: Optional[str] = None,
        available_from: Optional[str] = None,
        available_to: Optional[str] = None,
        q: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> "ListingFilters":
        """Build filters from raw query-string values.

        Raises:
            InvalidFilter: a value is malformed or out of range.
        """
        try:
            sort_value = ListingSort(sort) if sort else ListingSort.NEWEST
        except ValueError:
            allowed = ", ".join(s.value for s in ListingSort)
            raise InvalidFilter(f"sort must be one of: {allowed}")

        return cls(
            price_min=_decimal("priceMin", price_min),
            price_max=_decimal("priceMax", price_max),
            bedrooms_min=_integer("bedrooms", bedrooms),
            bathrooms_min=_decimal("bathrooms", bathrooms),
            distance_max=_decimal("distanceMax", distance_max),
            furnished=_boolean("furnished", furnished),
            amenities=_tags(amenities),
            available_from=_date("availableFrom", available_from),
            available_to=_date("availableTo", available_to),
            text=q.strip() if q and q.strip() else None,
            sort=sort_value,
        )


# ---------------------------------------------------------------------------
# In-memory predicates
# ---------------------------------------------------------------------------

def _listing_price(listing: Listing) -> Optional[Decimal]:
    """Parsed price, or None (logged) when the stored value is not a finite number."""
    try:
        price = parse_price(listing.price)
    except InvalidOperation:
        price = None
    if price is None or not price.is_finite():
        logger.warning("Listing %s has unparseable price %r", listing.id, listing.price)
        return None
    return price


def _price_in_range(listing: Listing, filters: ListingFilters) -> bool:
    price = _listing_price(listing)
    if price is None:
        return False
    if filters.price_min is not None and price < filters.price_min:
        return False
    if filters.price_max is not None and price > filters.price_max:
        return False
    return True


def _has_all_amenities(listing: Listing, wanted: Sequence[str]) -> bool:
    tags = set(listing.amenities or [])
    return all(tag in tags for tag in wanted)


def _covers_window(listing: Listing, filters: ListingFilters) -> bool:
    """Listing must be available by ``available_from`` and through ``available_to``."""
    try:
        listing_from = date.fromisoformat(listing.available_from)
        listing_to = date.fromisoformat(listing.available_to)
    except ValueError:
        return False
    if filters.available_from is not None and listing_from > filters.available_from:
        return False
    if filters.available_to is not None and listing_to < filters.available_to:
        return False
    return True


def _matches_text(listing: Listing, text: str) -> bool:
    needle = text.lower()
    return any(
        needle in (value or "").lower()
        for value in (listing.title, listing.description, listing.address)
    )


def _price_sort_key(listing: Listing, descending: bool) -> tuple[bool, Decimal]:
    # Unparseable prices go last in either direction
    price = _listing_price(listing)
    if price is None:
        return True, Decimal(0)
    return False, -price if descending else price


def sort_listings(listings: list[Listing], sort: ListingSort) -> list[Listing]:
    """Stable re-sort of an already newest-first list."""
    if sort == ListingSort.PRICE_LOW:
        return sorted(listings, key=lambda l: _price_sort_key(l, descending=False))
    if sort == ListingSort.PRICE_HIGH:
        return sorted(listings, key=lambda l: _price_sort_key(l, descending=True))
    if sort == ListingSort.DISTANCE:
        return sorted(listings, key=lambda l: Decimal(l.distance_to_campus))
    return list(listings)


def refine(listings: Sequence[Listing], filters: ListingFilters) -> list[Listing]:
    """Apply the in-memory predicates, preserving input order."""
    refined = list(listings)
    if filters.price_min is not None or filters.price_max is not None:
        refined = [l for l in refined if _price_in_range(l, filters)]
    if filters.amenities:
        refined = [l for l in refined if _has_all_amenities(l, filters.amenities)]
    if filters.available_from is not None or filters.available_to is not None:
        refined = [l for l in refined if _covers_window(l, filters)]
    if filters.text:
        refined = [l for l in refined if _matches_text(l, filters.text)]
    return refined


def map_pins(listings: Sequence[Listing]) -> list[dict]:
    """Project listings to what the map widget needs."""
    return [
        {
            "id": l.id,
            "title": l.title,
            "latitude": l.latitude,
            "longitude": l.longitude,
            "price": l.price,
        }
        for l in listings
    ]


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class ListingQueryEngine:
    """Runs listing searches against the store."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def build_query(self, filters: ListingFilters):
        """Store-side part of the search: availability plus native predicates."""
        conditions = [Listing.is_available.is_(True)]

        if filters.bedrooms_min is not None:
            conditions.append(Listing.bedrooms >= filters.bedrooms_min)
        if filters.bathrooms_min is not None:
            conditions.append(Listing.bathrooms >= filters.bathrooms_min)
        if filters.furnished is not None:
            conditions.append(Listing.furnished.is_(filters.furnished))
        if filters.distance_max is not None:
            conditions.append(Listing.distance_to_campus <= filters.distance_max)

        return (
            select(Listing)
            .where(*conditions)
            .order_by(Listing.created_at.desc(), Listing.id.desc())
        )

    async def search(self, filters: Optional[ListingFilters] = None) -> list[Listing]:
        filters = filters or ListingFilters()
        result = await self.db.execute(self.build_query(filters))
        rows = result.scalars().all()

        refined = refine(rows, filters)
        logger.debug(
            "Listing search: %d store rows, %d after refinement (%s)",
            len(rows), len(refined), filters,
        )
        return sort_listings(refined, filters.sort)
