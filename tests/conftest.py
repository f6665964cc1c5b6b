"""Shared test infrastructure for the sublease platform test suite.

Provides:
- settings: Settings with a fixed signing secret and no .env lookup
- db_session: async SQLite in-memory session with all tables created
- make_user / make_listing: row factories
- auth_headers: Bearer header for a user
- client: HTTPX AsyncClient wired to the app with the db session overridden
"""

from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from sublease_platform.app.config import Settings
from sublease_platform.domain.models import Listing, User
from sublease_platform.infra.database import (
    Base,
    build_engine,
    build_session_factory,
    get_db,
)
from sublease_platform.services.auth_service import create_access_token


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite://",
        jwt_secret_key="test-secret",
        debug=True,
    )


# ---------------------------------------------------------------------------
# Database session fixture
# ---------------------------------------------------------------------------

@pytest.fixture
async def db_session():
    """Async SQLite in-memory session with all tables created.

    Built with the application's engine factory so foreign keys (and
    therefore cascades) are enforced exactly as in production.
    """
    engine = build_engine("sqlite+aiosqlite://")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = build_session_factory(engine)

    async with session_factory() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_user(db_session):
    """Factory that creates a User row.

    The password hash is a placeholder; use ``AuthService.sign_up`` when a
    test needs to sign in.

    Usage:
        alice = await make_user("alice@nd.edu")
    """
    counter = {"n": 0}

    async def _factory(email: str | None = None, name: str = "Test Student") -> User:
        counter["n"] += 1
        user = User(
            email=email or f"student{counter['n']}@nd.edu",
            name=name,
            password_hash="not-a-real-hash",
        )
        db_session.add(user)
        await db_session.flush()
        return user

    return _factory


@pytest.fixture
def make_listing(db_session, make_user):
    """Factory that creates a Listing row, with an owner if none is given.

    Usage:
        listing = await make_listing(price="950", amenities=["WiFi"])
    """
    async def _factory(owner: User | None = None, **overrides) -> Listing:
        if owner is None:
            owner = await make_user()
        values = {
            "title": "Sunny room near campus",
            "description": "Quiet, close to the library.",
            "price": "1000",
            "bedrooms": 2,
            "bathrooms": Decimal("1"),
            "address": "100 Test Street, South Bend, IN",
            "latitude": Decimal("41.70"),
            "longitude": Decimal("-86.24"),
            "distance_to_campus": Decimal("1.00"),
            "furnished": False,
            "available_from": "2025-01-01",
            "available_to": "2025-06-30",
            "amenities": [],
            "images": ["https://example.com/room.jpg"],
            "contact_email": owner.email,
            "is_available": True,
        }
        values.update(overrides)
        listing = Listing(owner=owner, **values)
        db_session.add(listing)
        await db_session.flush()
        return listing

    return _factory


@pytest.fixture
def auth_headers(settings):
    """Factory: ``Authorization`` header carrying a valid token for ``user``."""
    def _factory(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user, settings)}"}

    return _factory


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

@pytest.fixture
async def client(db_session, settings):
    """HTTPX AsyncClient against the full app, sharing the test session."""
    from sublease_platform.app.main import create_app

    app = create_app(settings)

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as ac:
        yield ac
