"""AuctionApplicationService — read-only views over the auction record and ledger.

No commit/rollback needed. The caller (router) passes the db session.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_auction.application.schemas import AuctionDetail, MyBidResponse
from src.am_auction.domain.repository import AuctionRepositoryProtocol, BidLedgerProtocol
from src.am_auction.infrastructure.persistence import AuctionRepository, BidLedger
from src.am_common.errors import AuctionNotFoundError, BidNotFoundError


class AuctionApplicationService:
    def __init__(
        self,
        auctions: AuctionRepositoryProtocol | None = None,
        ledger: BidLedgerProtocol | None = None,
    ) -> None:
        self._auctions: AuctionRepositoryProtocol = auctions or AuctionRepository()
        self._ledger: BidLedgerProtocol = ledger or BidLedger()

    async def get_auction(self, db: AsyncSession, auction_id: str) -> AuctionDetail:
        auction = await self._auctions.get_auction(db, auction_id)
        if auction is None:
            raise AuctionNotFoundError(auction_id)
        return AuctionDetail.from_domain(auction)

    async def get_my_bid(
        self, db: AsyncSession, auction_id: str, bidder_id: str
    ) -> MyBidResponse:
        auction = await self._auctions.get_auction(db, auction_id)
        if auction is None:
            raise AuctionNotFoundError(auction_id)
        bid = await self._ledger.get_bid(db, auction_id, bidder_id)
        if bid is None:
            raise BidNotFoundError(auction_id)
        top = await self._ledger.get_top_public_bid(db, auction_id)
        is_leading = top is not None and top.bidder_id == bid.bidder_id
        return MyBidResponse.from_domain(bid, is_leading)
