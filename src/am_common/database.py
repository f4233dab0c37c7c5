"""Async engine and session plumbing for PostgreSQL.

Only `users` is ORM-mapped (read by the auth dependency); auctions, bids,
orders and the rest are queried with raw SQL in the repositories. Sessions
never auto-commit: services own commit/rollback, one transaction per bid
and two per settled auction.
"""

from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


class Base(DeclarativeBase):
    pass


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    # Settlement loop may sit idle between passes; drop dead connections
    pool_pre_ping=True,
)

# expire_on_commit=False: settlement reads rows after its claim commit
async_session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
    engine,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency: one session per request, closed afterwards.

    Anything left uncommitted when the request ends is rolled back by close().
    """
    async with async_session_factory() as session:
        yield session
