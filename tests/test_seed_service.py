"""Tests for the sample-data seeder."""

from sqlalchemy import func, select

from sublease_platform.domain.models import Listing, User
from sublease_platform.services.listing_query import ListingFilters, ListingQueryEngine
from sublease_platform.services.seed_service import SAMPLE_LISTINGS, seed_sample_listings


class TestSeedSampleListings:

    async def test_creates_demo_member_and_listings(self, db_session, settings):
        created = await seed_sample_listings(db_session, settings)

        assert created == len(SAMPLE_LISTINGS)
        [owner] = (await db_session.execute(select(User))).scalars().all()
        assert owner.email.endswith(settings.allowed_email_domain)

        listings = await ListingQueryEngine(db_session).search()
        assert len(listings) == len(SAMPLE_LISTINGS)
        assert all(l.user_id == owner.id for l in listings)
        assert all(l.contact_email.endswith(settings.allowed_email_domain) for l in listings)

    async def test_second_run_creates_nothing(self, db_session, settings):
        await seed_sample_listings(db_session, settings)

        assert await seed_sample_listings(db_session, settings) == 0
        assert await db_session.scalar(select(func.count(Listing.id))) == len(SAMPLE_LISTINGS)
        assert await db_session.scalar(select(func.count(User.id))) == 1

    async def test_seeded_data_is_searchable(self, db_session, settings):
        await seed_sample_listings(db_session, settings)

        results = await ListingQueryEngine(db_session).search(
            ListingFilters.from_query(amenities="WiFi,Yard", price_max="2000")
        )

        assert [l.title for l in results] == ["Spacious 3BR House with Yard - Eddy Street"]
