"""Domain models for am_auction — pure dataclasses, no business logic.

Money fields are pence (int). `current_bid` and `bid_count` are a cached
projection over the bid ledger and are only ever written by arbitration.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Auction:
    id: str
    listing_id: str
    seller_id: str
    listing_title: str
    starting_bid: int
    reserve_price: int
    current_bid: int
    bid_count: int
    reserve_met: bool
    status: str
    end_time: datetime
    winner_id: str | None
    created_at: datetime
    updated_at: datetime


@dataclass
class Bid:
    """One ledger row per (auction, bidder)."""

    id: str
    auction_id: str
    bidder_id: str
    bid_amount: int  # public amount attributed to this bidder
    max_bid_amount: int  # secret ceiling, never decreases
    created_at: datetime  # first bid by this bidder; tie-break key
    updated_at: datetime


def rank_bids(bids: list[Bid]) -> list[Bid]:
    """Order by ceiling descending; equal ceilings go to the earliest bidder."""
    return sorted(bids, key=lambda b: (-b.max_bid_amount, b.created_at))
