"""Pydantic schemas for am_auction API responses.

The reserve price is never exposed; bidders only see whether it is met.
Other bidders' ceilings are never exposed; a caller may see their own.
"""

from pydantic import BaseModel

from src.am_auction.domain.models import Auction, Bid
from src.am_common.money import pence_to_display


class AuctionDetail(BaseModel):
    id: str
    listing_id: str
    title: str
    status: str
    starting_bid_pence: int
    starting_bid_display: str
    current_bid_pence: int
    current_bid_display: str
    bid_count: int
    reserve_met: bool
    end_time: str
    winner_id: str | None

    @classmethod
    def from_domain(cls, a: Auction) -> "AuctionDetail":
        return cls(
            id=a.id,
            listing_id=a.listing_id,
            title=a.listing_title,
            status=a.status,
            starting_bid_pence=a.starting_bid,
            starting_bid_display=pence_to_display(a.starting_bid),
            current_bid_pence=a.current_bid,
            current_bid_display=pence_to_display(a.current_bid),
            bid_count=a.bid_count,
            reserve_met=a.reserve_met,
            end_time=a.end_time.isoformat(),
            winner_id=a.winner_id,
        )


class MyBidResponse(BaseModel):
    auction_id: str
    bid_amount_pence: int
    max_bid_pence: int
    max_bid_display: str
    is_leading: bool
    first_bid_at: str

    @classmethod
    def from_domain(cls, bid: Bid, is_leading: bool) -> "MyBidResponse":
        return cls(
            auction_id=bid.auction_id,
            bid_amount_pence=bid.bid_amount,
            max_bid_pence=bid.max_bid_amount,
            max_bid_display=pence_to_display(bid.max_bid_amount),
            is_leading=is_leading,
            first_bid_at=bid.created_at.isoformat(),
        )
