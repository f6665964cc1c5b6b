"""Sample data for local development: one demo member and a handful of listings."""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sublease_platform.app.config import Settings
from sublease_platform.domain.enums import Amenity
from sublease_platform.domain.models import Listing, User
from sublease_platform.services.auth_service import hash_password
from sublease_platform.services.listing_service import distance_to_campus

logger = logging.getLogger(__name__)

DEMO_EMAIL_LOCAL = "demo.student"
DEMO_NAME = "Demo Student"
DEMO_PASSWORD = "demo-sublease"

_UNSPLASH = "https://images.unsplash.com/{}?w=800&h=600&fit=crop&crop=center"

SAMPLE_LISTINGS = [
    {
        "title": "Cozy 2BR Near Campus - Spring Sublease",
        "description": (
            "Beautiful 2-bedroom apartment just half a mile from campus. Fully furnished "
            "with modern amenities, ideal for the spring semester."
        ),
        "price": "1200",
        "bedrooms": 2,
        "bathrooms": Decimal("1.5"),
        "address": "123 Notre Dame Avenue, South Bend, IN 46556",
        "latitude": Decimal("41.7021"),
        "longitude": Decimal("-86.2367"),
        "furnished": True,
        "available_from": "2025-01-15",
        "available_to": "2025-05-15",
        "amenities": [Amenity.WIFI, Amenity.PARKING, Amenity.AC, Amenity.LAUNDRY, Amenity.DISHWASHER],
        "images": [
            _UNSPLASH.format("photo-1560448204-e02f11c3d0e2"),
            _UNSPLASH.format("photo-1522708323590-d24dbb6b0267"),
        ],
        "contact_local": "student1",
        "contact_phone": "(574) 123-4567",
    },
    {
        "title": "Modern Studio Apartment - Downtown",
        "description": (
            "Stylish studio in downtown South Bend, recently renovated. Great for "
            "graduate students who prefer city living."
        ),
        "price": "950",
        "bedrooms": 1,
        "bathrooms": Decimal("1"),
        "address": "456 Main Street, South Bend, IN 46601",
        "latitude": Decimal("41.6764"),
        "longitude": Decimal("-86.2520"),
        "furnished": False,
        "available_from": "2025-02-01",
        "available_to": "2025-08-31",
        "amenities": [Amenity.WIFI, Amenity.AC, Amenity.GYM, Amenity.PARKING],
        "images": [
            _UNSPLASH.format("photo-1522771739844-6a9f6d5f14af"),
            _UNSPLASH.format("photo-1484154218962-a197022b5858"),
        ],
        "contact_local": "gradstudent",
        "contact_phone": None,
    },
    {
        "title": "Spacious 3BR House with Yard - Eddy Street",
        "description": (
            "Large 3-bedroom house for a group of students, with a big backyard, "
            "full basement and plenty of parking."
        ),
        "price": "1800",
        "bedrooms": 3,
        "bathrooms": Decimal("2"),
        "address": "789 Eddy Street, South Bend, IN 46617",
        "latitude": Decimal("41.6998"),
        "longitude": Decimal("-86.2345"),
        "furnished": True,
        "available_from": "2025-03-01",
        "available_to": "2025-12-31",
        "amenities": [Amenity.WIFI, Amenity.PARKING, Amenity.LAUNDRY, Amenity.YARD, Amenity.DISHWASHER],
        "images": [
            _UNSPLASH.format("photo-1570129477492-45c003edd2be"),
            _UNSPLASH.format("photo-1449844908441-8829872d2607"),
        ],
        "contact_local": "housemates",
        "contact_phone": "(574) 987-6543",
    },
    {
        "title": "Luxury 1BR Apartment - University Commons",
        "description": (
            "Premium 1-bedroom in University Commons, walking distance to campus "
            "with access to all Commons amenities."
        ),
        "price": "1400",
        "bedrooms": 1,
        "bathrooms": Decimal("1"),
        "address": "321 University Commons, South Bend, IN 46617",
        "latitude": Decimal("41.7012"),
        "longitude": Decimal("-86.2340"),
        "furnished": True,
        "available_from": "2025-01-20",
        "available_to": "2025-07-31",
        "amenities": [
            Amenity.WIFI, Amenity.AC, Amenity.POOL, Amenity.GYM, Amenity.STUDY_ROOM, Amenity.PARKING,
        ],
        "images": [
            _UNSPLASH.format("photo-1502672260266-1c1ef2d93688"),
            _UNSPLASH.format("photo-1493809842364-78817add7ffb"),
        ],
        "contact_local": "luxury.living",
        "contact_phone": "(574) 555-0123",
    },
    {
        "title": "Affordable 2BR - Perfect for Roommates",
        "description": (
            "Budget-friendly 2-bedroom for students sharing costs. Clean, safe and "
            "well-maintained building with on-site management."
        ),
        "price": "800",
        "bedrooms": 2,
        "bathrooms": Decimal("1"),
        "address": "654 Corby Boulevard, South Bend, IN 46617",
        "latitude": Decimal("41.7045"),
        "longitude": Decimal("-86.2398"),
        "furnished": False,
        "available_from": "2025-02-15",
        "available_to": "2025-08-15",
        "amenities": [Amenity.WIFI, Amenity.PARKING, Amenity.LAUNDRY],
        "images": [_UNSPLASH.format("photo-1494526585095-c41746248156")],
        "contact_local": "affordable.housing",
        "contact_phone": "(574) 234-5678",
    },
    {
        "title": "Charming Duplex with Balcony - Quiet Neighborhood",
        "description": (
            "Duplex unit on a quiet residential street with a private balcony and "
            "updated kitchen. A peaceful place to study."
        ),
        "price": "1100",
        "bedrooms": 2,
        "bathrooms": Decimal("1"),
        "address": "987 Napoleon Boulevard, South Bend, IN 46617",
        "latitude": Decimal("41.7089"),
        "longitude": Decimal("-86.2421"),
        "furnished": True,
        "available_from": "2025-03-15",
        "available_to": "2025-09-30",
        "amenities": [Amenity.WIFI, Amenity.AC, Amenity.BALCONY, Amenity.PARKING, Amenity.DISHWASHER],
        "images": [
            _UNSPLASH.format("photo-1512917774080-9991f1c4c750"),
            _UNSPLASH.format("photo-1558618047-3c8c76ca7d13"),
        ],
        "contact_local": "quiet.living",
        "contact_phone": None,
    },
]


async def _get_or_create_demo_user(db: AsyncSession, settings: Settings) -> User:
    email = f"{DEMO_EMAIL_LOCAL}{settings.allowed_email_domain}"
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user is None:
        user = User(email=email, name=DEMO_NAME, password_hash=hash_password(DEMO_PASSWORD))
        db.add(user)
        await db.flush()
        logger.info("Created demo user %s", email)
    return user


async def seed_sample_listings(db: AsyncSession, settings: Settings) -> int:
    """Insert any sample listings not already present (matched by title).

    Returns the number of listings created.
    """
    owner = await _get_or_create_demo_user(db, settings)

    result = await db.execute(
        select(Listing.title).where(Listing.title.in_([s["title"] for s in SAMPLE_LISTINGS]))
    )
    existing_titles = set(result.scalars().all())

    created = 0
    for sample in SAMPLE_LISTINGS:
        if sample["title"] in existing_titles:
            continue
        values = {k: v for k, v in sample.items() if k != "contact_local"}
        values["amenities"] = [a.value for a in sample["amenities"]]
        values["contact_email"] = f"{sample['contact_local']}{settings.allowed_email_domain}"
        values["distance_to_campus"] = distance_to_campus(
            sample["latitude"], sample["longitude"], settings,
        )
        db.add(Listing(user_id=owner.id, is_available=True, **values))
        created += 1

    await db.commit()
    logger.info("Seeded %d sample listings (%d already present)", created, len(existing_titles))
    return created
