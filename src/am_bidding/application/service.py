# src/am_bidding/application/service.py
"""BiddingService — one proxy bid, one transaction, one locked auction row.

Flow:
  1. validate amount (no I/O)
  2. lock auction row (FOR UPDATE, bounded by lock_timeout)
  3. open / seller / minimum checks against the locked snapshot
  4. read ledger, arbitrate, write ledger + auction projection
  5. commit; any rejection or error rolls back with nothing written
"""

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_auction.domain.repository import AuctionRepositoryProtocol, BidLedgerProtocol
from src.am_auction.infrastructure.persistence import AuctionRepository, BidLedger
from src.am_bidding.application.schemas import PlaceBidRequest, PlaceBidResponse
from src.am_bidding.domain.proxy import ArbitrationResult, arbitrate
from src.am_bidding.domain.rules import (
    check_auction_open,
    check_bid_amount,
    check_minimum_bid,
    check_not_seller,
)
from src.am_common.datetime_utils import utc_now
from src.am_common.errors import AuctionNotFoundError, BidTooLowError
from src.am_common.money import pence_to_display

logger = logging.getLogger(__name__)


class BiddingService:
    def __init__(
        self,
        auctions: AuctionRepositoryProtocol | None = None,
        ledger: BidLedgerProtocol | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._auctions: AuctionRepositoryProtocol = auctions or AuctionRepository()
        self._ledger: BidLedgerProtocol = ledger or BidLedger()
        self._clock = clock

    async def place_bid(
        self, req: PlaceBidRequest, bidder_id: str, db: AsyncSession
    ) -> PlaceBidResponse:
        max_bid = check_bid_amount(req.max_bid_amount)
        auction_id = str(req.auction_id)

        try:
            result = await self._place_bid_locked(auction_id, bidder_id, max_bid, db)
        except BidTooLowError as exc:
            await db.rollback()
            return PlaceBidResponse(
                success=False,
                minimum_bid_pence=exc.minimum_bid,
                minimum_bid_display=pence_to_display(exc.minimum_bid),
                error=exc.message,
            )
        except Exception:
            await db.rollback()
            raise
        await db.commit()

        logger.info(
            "Bid accepted auction=%s bidder=%s price=%d leader=%s bids=%d",
            auction_id,
            bidder_id,
            result.new_current_bid,
            result.leader_id,
            result.bid_count,
        )
        return PlaceBidResponse(
            success=True,
            current_bid_pence=result.new_current_bid,
            current_bid_display=pence_to_display(result.new_current_bid),
            is_leading=result.is_leading,
            reserve_met=result.reserve_met,
            max_bid_pence=result.caller_max_bid,
        )

    async def _place_bid_locked(
        self, auction_id: str, bidder_id: str, max_bid: int, db: AsyncSession
    ) -> ArbitrationResult:
        now = self._clock()
        auction = await self._auctions.lock_auction(db, auction_id)
        if auction is None:
            raise AuctionNotFoundError(auction_id)
        check_auction_open(auction, now)
        check_not_seller(auction, bidder_id)
        check_minimum_bid(auction, max_bid)

        bids = await self._ledger.list_bids(db, auction_id)
        result = arbitrate(auction, bids, bidder_id, max_bid, now)

        if result.is_first_bid:
            await self._ledger.insert_bid(
                db,
                auction_id,
                bidder_id,
                bid_amount=result.caller_bid_amount,
                max_bid_amount=result.caller_max_bid,
                created_at=result.created_at,
            )
        else:
            await self._ledger.update_bid(
                db,
                auction_id,
                bidder_id,
                bid_amount=result.caller_bid_amount,
                max_bid_amount=result.caller_max_bid,
            )
        if result.rival_leader_id is not None and result.rival_bid_amount is not None:
            await self._ledger.update_bid(
                db, auction_id, result.rival_leader_id, bid_amount=result.rival_bid_amount
            )

        await self._auctions.apply_bid_result(
            db,
            auction_id,
            current_bid=result.new_current_bid,
            bid_count=result.bid_count,
            reserve_met=result.reserve_met,
        )
        return result
