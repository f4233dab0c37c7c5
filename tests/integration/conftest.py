"""Integration-test fixtures.

Requires a reachable PostgreSQL at settings.DATABASE_URL. The schema is
brought to head with the project's own alembic migrations once per session;
when the database cannot be reached every integration test is skipped.

Each test seeds its own users, listing and auction with unique names, so
runs against a long-lived dev database do not interfere with each other.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path

import pytest
import pytest_asyncio
from alembic import command
from alembic.config import Config
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from config.settings import settings
from src.am_common.datetime_utils import utc_now

ROOT = Path(__file__).resolve().parents[2]


@pytest.fixture(scope="session", autouse=True)
def migrated_database() -> None:
    """alembic upgrade head; sync because env.py drives its own event loop."""
    cfg = Config()
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    try:
        command.upgrade(cfg, "head")
    except (OSError, SQLAlchemyError) as exc:
        pytest.skip(f"PostgreSQL not available: {exc}")


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def session_factory() -> async_sessionmaker[AsyncSession]:
    """NullPool engine: every session gets its own connection, so a test can
    hold a row lock in one session while another waits on it."""
    engine = create_async_engine(settings.DATABASE_URL, poolclass=NullPool)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def seed() -> "Seeder":
    return Seeder()


# ---------------------------------------------------------------------------
# Seed helpers
# ---------------------------------------------------------------------------


@dataclass
class SeededAuction:
    auction_id: str
    listing_id: str
    seller_id: str


class Seeder:
    """Raw-SQL inserts for the rows a test needs; the caller commits."""

    async def user(self, db: AsyncSession, prefix: str = "bidder") -> str:
        uid = uuid.uuid4().hex[:12]
        result = await db.execute(
            text("""
                INSERT INTO users (username, email)
                VALUES (:username, :email)
                RETURNING id
            """),
            {"username": f"{prefix}_{uid}", "email": f"{prefix}_{uid}@example.com"},
        )
        return str(result.scalar_one())

    async def auction(
        self,
        db: AsyncSession,
        starting_bid: int = 0,
        reserve_price: int = 2000,
        end_time: datetime | None = None,
    ) -> SeededAuction:
        seller_id = await self.user(db, "seller")
        listing = await db.execute(
            text("""
                INSERT INTO listings (seller_id, title, status)
                VALUES (:seller_id, 'Brass lamp', 'published')
                RETURNING id
            """),
            {"seller_id": seller_id},
        )
        listing_id = str(listing.scalar_one())
        auction = await db.execute(
            text("""
                INSERT INTO auctions (listing_id, starting_bid, reserve_price,
                                      status, start_time, end_time)
                VALUES (:listing_id, :starting_bid, :reserve_price,
                        'active', NOW(), :end_time)
                RETURNING id
            """),
            {
                "listing_id": listing_id,
                "starting_bid": starting_bid,
                "reserve_price": reserve_price,
                "end_time": end_time or utc_now() + timedelta(hours=1),
            },
        )
        return SeededAuction(str(auction.scalar_one()), listing_id, seller_id)

    async def payment_method(self, db: AsyncSession, user_id: str, ref: str) -> None:
        await db.execute(
            text("""
                INSERT INTO payment_profiles (user_id, payment_method_ref)
                VALUES (:user_id, :ref)
            """),
            {"user_id": user_id, "ref": ref},
        )

    async def payout_account(self, db: AsyncSession, seller_id: str, ref: str) -> None:
        await db.execute(
            text("""
                INSERT INTO payout_accounts (seller_id, account_ref, payouts_enabled)
                VALUES (:seller_id, :ref, TRUE)
            """),
            {"seller_id": seller_id, "ref": ref},
        )

    async def expire(self, db: AsyncSession, auction_id: str) -> None:
        await db.execute(
            text("UPDATE auctions SET end_time = NOW() - INTERVAL '1 minute' WHERE id = :id"),
            {"id": auction_id},
        )
