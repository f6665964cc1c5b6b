"""Authentication routes: signup, signin, me."""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from sublease_platform.app.config import Settings, get_settings
from sublease_platform.domain.schemas import (
    AuthResponse,
    SignInRequest,
    SignUpRequest,
    UserResponse,
)
from sublease_platform.infra.database import get_db
from sublease_platform.services.auth_service import AuthService, resolve_caller

router = APIRouter(prefix="/api/auth", tags=["auth"])


async def get_current_user_id(
    request: Request, settings: Settings = Depends(get_settings)
) -> int:
    """Dependency: resolve the caller's user id from the Bearer token."""
    auth_header = request.headers.get("Authorization", "")
    token = auth_header.removeprefix("Bearer ") if auth_header.startswith("Bearer ") else None
    return resolve_caller(token, settings)


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    data: SignUpRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    token, user = await AuthService(db, settings).sign_up(data.email, data.password, data.name)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/signin", response_model=AuthResponse)
async def signin(
    data: SignInRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    token, user = await AuthService(db, settings).sign_in(data.email, data.password)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
async def me(
    caller_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Return the authenticated user's profile."""
    return await AuthService(db, settings).get_user(caller_id)
