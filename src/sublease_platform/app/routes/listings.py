"""Listing routes: public search and detail, owner-only mutations."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sublease_platform.app.config import Settings, get_settings
from sublease_platform.app.routes.auth import get_current_user_id
from sublease_platform.domain.schemas import (
    AvailabilityUpdate,
    ListingCreate,
    ListingResponse,
    ListingUpdate,
    MapPin,
)
from sublease_platform.infra.database import get_db
from sublease_platform.services.listing_query import ListingFilters, ListingQueryEngine, map_pins
from sublease_platform.services.listing_service import ListingService

router = APIRouter(prefix="/api/listings", tags=["listings"])
my_listings_router = APIRouter(prefix="/api/my-listings", tags=["listings"])


def listing_filters(
    price_min: Optional[str] = Query(None, alias="priceMin"),
    price_max: Optional[str] = Query(None, alias="priceMax"),
    bedrooms: Optional[str] = Query(None, description="Minimum bedrooms"),
    bathrooms: Optional[str] = Query(None, description="Minimum bathrooms"),
    distance_max: Optional[str] = Query(None, alias="distanceMax", description="Miles from campus"),
    furnished: Optional[str] = Query(None),
    amenities: Optional[str] = Query(None, description="Comma-separated tags; all must match"),
    available_from: Optional[str] = Query(None, alias="availableFrom"),
    available_to: Optional[str] = Query(None, alias="availableTo"),
    q: Optional[str] = Query(None, description="Text search over title, description, address"),
    sort: Optional[str] = Query(None, description="newest, price-low, price-high, distance"),
) -> ListingFilters:
    """Dependency: parse raw query values into ``ListingFilters`` (400 on bad input)."""
    return ListingFilters.from_query(
        price_min=price_min,
        price_max=price_max,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        distance_max=distance_max,
        furnished=furnished,
        amenities=amenities,
        available_from=available_from,
        available_to=available_to,
        q=q,
        sort=sort,
    )


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------

@router.get("", response_model=list[ListingResponse])
async def search_listings(
    filters: ListingFilters = Depends(listing_filters),
    db: AsyncSession = Depends(get_db),
):
    return await ListingQueryEngine(db).search(filters)


@router.get("/pins", response_model=list[MapPin])
async def listing_pins(
    filters: ListingFilters = Depends(listing_filters),
    db: AsyncSession = Depends(get_db),
):
    """Same search as the list view, projected for the map."""
    return map_pins(await ListingQueryEngine(db).search(filters))


@router.get("/{listing_id}", response_model=ListingResponse)
async def get_listing(
    listing_id: int,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return await ListingService(db, settings).get(listing_id)


# ---------------------------------------------------------------------------
# Owner
# ---------------------------------------------------------------------------

@router.post("", response_model=ListingResponse, status_code=status.HTTP_201_CREATED)
async def create_listing(
    data: ListingCreate,
    caller_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return await ListingService(db, settings).create(caller_id, data)


@router.put("/{listing_id}", response_model=ListingResponse)
async def update_listing(
    listing_id: int,
    data: ListingUpdate,
    caller_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return await ListingService(db, settings).update(listing_id, caller_id, data)


@router.patch("/{listing_id}/availability", response_model=ListingResponse)
async def set_listing_availability(
    listing_id: int,
    data: AvailabilityUpdate,
    caller_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return await ListingService(db, settings).set_availability(
        listing_id, caller_id, data.is_available,
    )


@router.delete("/{listing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_listing(
    listing_id: int,
    caller_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    await ListingService(db, settings).delete(listing_id, caller_id)


@my_listings_router.get("", response_model=list[ListingResponse])
async def my_listings(
    caller_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """The caller's own listings, including ones marked unavailable."""
    return await ListingService(db, settings).list_for_owner(caller_id)
