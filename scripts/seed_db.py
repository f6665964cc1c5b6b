"""Seed script: create the demo member and sample listings.

Usage:
    python scripts/seed_db.py

Uses DATABASE_URL from .env (defaults to the local SQLite file). Safe to run
repeatedly; listings are matched by title.
"""

import asyncio
import logging
import os
import sys

# Ensure src is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

logging.basicConfig(level=logging.INFO, format="%(levelname)s  %(message)s")
logger = logging.getLogger(__name__)


async def seed():
    from sublease_platform.app.config import get_settings
    from sublease_platform.infra.database import build_engine, build_session_factory, init_db
    from sublease_platform.services.seed_service import seed_sample_listings

    settings = get_settings()
    engine = build_engine(settings.database_url)
    try:
        await init_db(engine)
        session_factory = build_session_factory(engine)
        async with session_factory() as session:
            created = await seed_sample_listings(session, settings)
    finally:
        await engine.dispose()

    logger.info("Done: %d listings created", created)


if __name__ == "__main__":
    asyncio.run(seed())
