# src/am_auction/domain/repository.py
"""Repository Protocols — dependency inversion for testability.

Unit tests inject in-memory fakes that conform to these Protocols.
Infrastructure layer provides the real implementations.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_auction.domain.models import Auction, Bid


class AuctionRepositoryProtocol(Protocol):
    async def get_auction(self, db: AsyncSession, auction_id: str) -> Auction | None: ...

    async def lock_auction(self, db: AsyncSession, auction_id: str) -> Auction | None:
        """Read the auction row under a per-row lock for the current transaction.

        Raises AuctionBusyError if the lock is not granted promptly.
        """
        ...

    async def list_due_for_settlement(
        self,
        db: AsyncSession,
        now: datetime,
        limit: int,
        after_id: str | None = None,
    ) -> list[str]:
        """Active auctions with end_time < now, ordered by (end_time, id),
        starting after the auction `after_id` when given."""
        ...

    async def apply_bid_result(
        self,
        db: AsyncSession,
        auction_id: str,
        current_bid: int,
        bid_count: int,
        reserve_met: bool,
    ) -> None: ...

    async def transition(
        self,
        db: AsyncSession,
        auction_id: str,
        from_status: str,
        to_status: str,
        winner_id: str | None = None,
    ) -> bool:
        """Conditional status change; False if the row was not in from_status."""
        ...


class BidLedgerProtocol(Protocol):
    async def list_bids(self, db: AsyncSession, auction_id: str) -> list[Bid]: ...

    async def get_bid(
        self, db: AsyncSession, auction_id: str, bidder_id: str
    ) -> Bid | None: ...

    async def get_top_public_bid(self, db: AsyncSession, auction_id: str) -> Bid | None:
        """Highest bid_amount; equal amounts go to the earliest bidder."""
        ...

    async def insert_bid(
        self,
        db: AsyncSession,
        auction_id: str,
        bidder_id: str,
        bid_amount: int,
        max_bid_amount: int,
        created_at: datetime,
    ) -> None: ...

    async def update_bid(
        self,
        db: AsyncSession,
        auction_id: str,
        bidder_id: str,
        bid_amount: int,
        max_bid_amount: int | None = None,
    ) -> None:
        """Set bid_amount; raise (never lower) the ceiling when max_bid_amount is given."""
        ...
