"""Favorites routes: save, unsave, list and check."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from sublease_platform.app.routes.auth import get_current_user_id
from sublease_platform.domain.schemas import FavoriteCreate, FavoriteStatus, ListingResponse
from sublease_platform.infra.database import get_db
from sublease_platform.services.favorites_service import FavoritesService

router = APIRouter(prefix="/api/favorites", tags=["favorites"])


@router.get("", response_model=list[ListingResponse])
async def list_favorites(
    caller_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await FavoritesService(db).list(caller_id)


@router.post("", response_model=FavoriteStatus, status_code=status.HTTP_201_CREATED)
async def add_favorite(
    data: FavoriteCreate,
    caller_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await FavoritesService(db).add(caller_id, data.listing_id)
    return FavoriteStatus(listing_id=data.listing_id, is_favorited=True)


@router.delete("/{listing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_favorite(
    listing_id: int,
    caller_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await FavoritesService(db).remove(caller_id, listing_id)


@router.get("/{listing_id}/check", response_model=FavoriteStatus)
async def check_favorite(
    listing_id: int,
    caller_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    is_favorited = await FavoritesService(db).is_favorited(caller_id, listing_id)
    return FavoriteStatus(listing_id=listing_id, is_favorited=is_favorited)
