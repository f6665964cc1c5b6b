"""Async database engine and session management.

The engine and session factory are built once by the application lifespan
and stored on ``app.state``; request handlers receive sessions through the
``get_db`` dependency.
"""

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from starlette.requests import Request


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all models."""
    pass


def _is_sqlite(database_url: str) -> bool:
    return "sqlite" in database_url


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine, auto-detecting driver options from the URL."""
    connect_args = {}
    engine_kwargs = {"echo": echo}
    if _is_sqlite(database_url):
        connect_args["check_same_thread"] = False
        connect_args["timeout"] = 30  # Wait up to 30s for write lock (default 5s)
    else:
        engine_kwargs["pool_size"] = 5
        engine_kwargs["max_overflow"] = 10

    engine = create_async_engine(database_url, connect_args=connect_args, **engine_kwargs)

    if _is_sqlite(database_url):
        # SQLite ignores ON DELETE CASCADE unless foreign keys are enabled per connection
        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables (for local dev). Use migrations for production schemas."""
    # Ensure models are registered with Base.metadata
    import sublease_platform.domain.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # WAL allows concurrent reads + single writer on file databases
    url = str(engine.url)
    if _is_sqlite(url) and engine.url.database not in (None, "", ":memory:"):
        async with engine.begin() as conn:
            await conn.execute(text("PRAGMA journal_mode=WAL"))
            await conn.execute(text("PRAGMA busy_timeout=30000"))


async def get_db(request: Request):
    """FastAPI dependency: yield an async database session."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


def insert_ignoring_conflicts(session: AsyncSession, model, **values):
    """Build ``INSERT ... ON CONFLICT DO NOTHING`` for the session's dialect.

    Used where a uniqueness constraint defines identity and concurrent
    callers should converge on the existing row instead of failing.
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise NotImplementedError(f"Conflict-tolerant insert not supported for {dialect}")
    return insert(model).values(**values).on_conflict_do_nothing()
