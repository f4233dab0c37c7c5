# src/am_admin/application/service.py
"""Admin application service — manual settlement trigger and ledger inspection."""
from collections.abc import Awaitable, Callable
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_auction.domain.models import rank_bids
from src.am_auction.domain.repository import AuctionRepositoryProtocol, BidLedgerProtocol
from src.am_auction.infrastructure.persistence import AuctionRepository, BidLedger
from src.am_common.errors import AuctionNotFoundError
from src.am_settlement.application.scheduler import run_settlement_pass
from src.am_settlement.domain.models import SettlementResult


class AdminService:
    def __init__(
        self,
        auctions: AuctionRepositoryProtocol | None = None,
        ledger: BidLedgerProtocol | None = None,
        settle: Callable[[], Awaitable[list[SettlementResult]]] | None = None,
    ) -> None:
        self._auctions: AuctionRepositoryProtocol = auctions or AuctionRepository()
        self._ledger: BidLedgerProtocol = ledger or BidLedger()
        self._settle = settle or run_settlement_pass

    async def run_settlement(self) -> dict[str, Any]:
        results = await self._settle()
        return {
            "processed": len(results),
            "failed": sum(1 for r in results if r.error is not None),
            "results": [r.to_dict() for r in results],
        }

    async def get_auction_ledger(self, auction_id: str, db: AsyncSession) -> dict[str, Any]:
        """Full record for manual resolution, including reserve and ceilings."""
        auction = await self._auctions.get_auction(db, auction_id)
        if auction is None:
            raise AuctionNotFoundError(auction_id)
        bids = rank_bids(await self._ledger.list_bids(db, auction_id))
        return {
            "auction_id": auction.id,
            "listing_id": auction.listing_id,
            "seller_id": auction.seller_id,
            "status": auction.status,
            "starting_bid": auction.starting_bid,
            "reserve_price": auction.reserve_price,
            "current_bid": auction.current_bid,
            "bid_count": auction.bid_count,
            "reserve_met": auction.reserve_met,
            "end_time": auction.end_time.isoformat(),
            "winner_id": auction.winner_id,
            "bids": [
                {
                    "bidder_id": b.bidder_id,
                    "bid_amount": b.bid_amount,
                    "max_bid_amount": b.max_bid_amount,
                    "created_at": b.created_at.isoformat(),
                }
                for b in bids
            ],
        }
