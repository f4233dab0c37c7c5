"""AuctionRepository / BidLedger — concrete implementations of the Protocols.

All queries use raw text() SQL (no ORM). Alembic migrations are the
authoritative DDL source.
"""

import uuid
from datetime import datetime

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.am_auction.domain.models import Auction, Bid
from src.am_common.errors import AuctionBusyError

_LOCK_NOT_AVAILABLE = "55P03"

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_AUCTION_COLUMNS = """
    a.id, a.listing_id, l.seller_id, l.title AS listing_title,
    a.starting_bid, a.reserve_price, a.current_bid, a.bid_count,
    a.reserve_met, a.status, a.end_time, a.winner_id,
    a.created_at, a.updated_at
"""

_GET_AUCTION_SQL = text(f"""
    SELECT {_AUCTION_COLUMNS}
    FROM auctions a
    JOIN listings l ON l.id = a.listing_id
    WHERE a.id = :auction_id
""")

_LOCK_AUCTION_SQL = text(f"""
    SELECT {_AUCTION_COLUMNS}
    FROM auctions a
    JOIN listings l ON l.id = a.listing_id
    WHERE a.id = :auction_id
    FOR UPDATE OF a
""")

_DUE_FOR_SETTLEMENT_SQL = text("""
    SELECT id
    FROM auctions
    WHERE status = 'active' AND end_time < :now
      AND (
          CAST(:after_id AS UUID) IS NULL
          OR (end_time, id) > (
              SELECT p.end_time, p.id FROM auctions p
              WHERE p.id = CAST(:after_id AS UUID)
          )
      )
    ORDER BY end_time ASC, id ASC
    LIMIT :limit
""")

_APPLY_BID_RESULT_SQL = text("""
    UPDATE auctions
    SET current_bid = :current_bid,
        bid_count = :bid_count,
        reserve_met = :reserve_met,
        updated_at = NOW()
    WHERE id = :auction_id
""")

_TRANSITION_SQL = text("""
    UPDATE auctions
    SET status = :to_status,
        winner_id = COALESCE(CAST(:winner_id AS UUID), winner_id),
        updated_at = NOW()
    WHERE id = :auction_id AND status = :from_status
""")

_BID_COLUMNS = """
    id, auction_id, bidder_id, bid_amount, max_bid_amount, created_at, updated_at
"""

_LIST_BIDS_SQL = text(f"""
    SELECT {_BID_COLUMNS}
    FROM bids
    WHERE auction_id = :auction_id
    ORDER BY max_bid_amount DESC, created_at ASC
""")

_GET_BID_SQL = text(f"""
    SELECT {_BID_COLUMNS}
    FROM bids
    WHERE auction_id = :auction_id AND bidder_id = :bidder_id
""")

_TOP_PUBLIC_BID_SQL = text(f"""
    SELECT {_BID_COLUMNS}
    FROM bids
    WHERE auction_id = :auction_id
    ORDER BY bid_amount DESC, created_at ASC
    LIMIT 1
""")

_INSERT_BID_SQL = text("""
    INSERT INTO bids (id, auction_id, bidder_id, bid_amount, max_bid_amount,
                      created_at, updated_at)
    VALUES (:id, :auction_id, :bidder_id, :bid_amount, :max_bid_amount,
            :created_at, :created_at)
""")

# GREATEST keeps the ceiling monotonic even if a caller passes a lower value
_UPDATE_BID_SQL = text("""
    UPDATE bids
    SET bid_amount = :bid_amount,
        max_bid_amount = GREATEST(max_bid_amount,
                                  COALESCE(CAST(:max_bid_amount AS BIGINT), 0)),
        updated_at = NOW()
    WHERE auction_id = :auction_id AND bidder_id = :bidder_id
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_auction(row: object) -> Auction:
    return Auction(
        id=str(row.id),  # type: ignore[attr-defined]
        listing_id=str(row.listing_id),  # type: ignore[attr-defined]
        seller_id=str(row.seller_id),  # type: ignore[attr-defined]
        listing_title=row.listing_title,  # type: ignore[attr-defined]
        starting_bid=row.starting_bid,  # type: ignore[attr-defined]
        reserve_price=row.reserve_price,  # type: ignore[attr-defined]
        current_bid=row.current_bid,  # type: ignore[attr-defined]
        bid_count=row.bid_count,  # type: ignore[attr-defined]
        reserve_met=row.reserve_met,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        end_time=row.end_time,  # type: ignore[attr-defined]
        winner_id=str(row.winner_id) if row.winner_id else None,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_bid(row: object) -> Bid:
    return Bid(
        id=str(row.id),  # type: ignore[attr-defined]
        auction_id=str(row.auction_id),  # type: ignore[attr-defined]
        bidder_id=str(row.bidder_id),  # type: ignore[attr-defined]
        bid_amount=row.bid_amount,  # type: ignore[attr-defined]
        max_bid_amount=row.max_bid_amount,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _is_lock_timeout(exc: DBAPIError) -> bool:
    orig = exc.orig
    return (
        getattr(orig, "sqlstate", None) == _LOCK_NOT_AVAILABLE
        or getattr(orig, "pgcode", None) == _LOCK_NOT_AVAILABLE
    )


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


class AuctionRepository:
    def __init__(self, lock_timeout_ms: int | None = None) -> None:
        self._lock_timeout_ms = int(lock_timeout_ms or settings.AUCTION_LOCK_TIMEOUT_MS)

    async def get_auction(self, db: AsyncSession, auction_id: str) -> Auction | None:
        result = await db.execute(_GET_AUCTION_SQL, {"auction_id": auction_id})
        row = result.fetchone()
        return _row_to_auction(row) if row else None

    async def lock_auction(self, db: AsyncSession, auction_id: str) -> Auction | None:
        # SET does not take bind parameters; the value is an int from settings
        await db.execute(text(f"SET LOCAL lock_timeout = '{self._lock_timeout_ms}ms'"))
        try:
            result = await db.execute(_LOCK_AUCTION_SQL, {"auction_id": auction_id})
        except DBAPIError as exc:
            if _is_lock_timeout(exc):
                raise AuctionBusyError(auction_id) from exc
            raise
        row = result.fetchone()
        return _row_to_auction(row) if row else None

    async def list_due_for_settlement(
        self,
        db: AsyncSession,
        now: datetime,
        limit: int,
        after_id: str | None = None,
    ) -> list[str]:
        result = await db.execute(
            _DUE_FOR_SETTLEMENT_SQL, {"now": now, "limit": limit, "after_id": after_id}
        )
        return [str(row.id) for row in result.fetchall()]

    async def apply_bid_result(
        self,
        db: AsyncSession,
        auction_id: str,
        current_bid: int,
        bid_count: int,
        reserve_met: bool,
    ) -> None:
        await db.execute(
            _APPLY_BID_RESULT_SQL,
            {
                "auction_id": auction_id,
                "current_bid": current_bid,
                "bid_count": bid_count,
                "reserve_met": reserve_met,
            },
        )

    async def transition(
        self,
        db: AsyncSession,
        auction_id: str,
        from_status: str,
        to_status: str,
        winner_id: str | None = None,
    ) -> bool:
        result = await db.execute(
            _TRANSITION_SQL,
            {
                "auction_id": auction_id,
                "from_status": from_status,
                "to_status": to_status,
                "winner_id": winner_id,
            },
        )
        return bool(result.rowcount)  # type: ignore[attr-defined]


class BidLedger:
    async def list_bids(self, db: AsyncSession, auction_id: str) -> list[Bid]:
        result = await db.execute(_LIST_BIDS_SQL, {"auction_id": auction_id})
        return [_row_to_bid(row) for row in result.fetchall()]

    async def get_bid(
        self, db: AsyncSession, auction_id: str, bidder_id: str
    ) -> Bid | None:
        result = await db.execute(
            _GET_BID_SQL, {"auction_id": auction_id, "bidder_id": bidder_id}
        )
        row = result.fetchone()
        return _row_to_bid(row) if row else None

    async def get_top_public_bid(self, db: AsyncSession, auction_id: str) -> Bid | None:
        result = await db.execute(_TOP_PUBLIC_BID_SQL, {"auction_id": auction_id})
        row = result.fetchone()
        return _row_to_bid(row) if row else None

    async def insert_bid(
        self,
        db: AsyncSession,
        auction_id: str,
        bidder_id: str,
        bid_amount: int,
        max_bid_amount: int,
        created_at: datetime,
    ) -> None:
        await db.execute(
            _INSERT_BID_SQL,
            {
                "id": str(uuid.uuid4()),
                "auction_id": auction_id,
                "bidder_id": bidder_id,
                "bid_amount": bid_amount,
                "max_bid_amount": max_bid_amount,
                "created_at": created_at,
            },
        )

    async def update_bid(
        self,
        db: AsyncSession,
        auction_id: str,
        bidder_id: str,
        bid_amount: int,
        max_bid_amount: int | None = None,
    ) -> None:
        await db.execute(
            _UPDATE_BID_SQL,
            {
                "auction_id": auction_id,
                "bidder_id": bidder_id,
                "bid_amount": bid_amount,
                "max_bid_amount": max_bid_amount,
            },
        )
