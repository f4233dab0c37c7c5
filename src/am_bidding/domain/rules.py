"""Bid preconditions, checked in this order by the bidding service:

1. amount       — positive, two decimals, <= MAX_BID_PENCE → InvalidAmountError
2. auction open — exists, active, before end_time       → AuctionNotFound/AuctionClosed
3. not seller   — bidder is not the listing's seller    → SelfBidForbiddenError
4. minimum      — ceiling >= floor + increment(floor)   → BidTooLowError
"""

from datetime import datetime
from decimal import Decimal

from config.settings import settings
from src.am_auction.domain.models import Auction
from src.am_auction.domain.state import is_open_for_bidding
from src.am_bidding.domain.increment import bid_increment
from src.am_common.errors import AuctionClosedError, BidTooLowError, SelfBidForbiddenError
from src.am_common.money import to_pence


def check_bid_amount(amount: Decimal) -> int:
    """Validate the submitted ceiling and return it in pence."""
    return to_pence(amount, settings.MAX_BID_PENCE)


def check_auction_open(auction: Auction, now: datetime) -> None:
    if not is_open_for_bidding(auction, now):
        raise AuctionClosedError(auction.id)


def check_not_seller(auction: Auction, bidder_id: str) -> None:
    if str(auction.seller_id).lower() == str(bidder_id).lower():
        raise SelfBidForbiddenError()


def price_floor(auction: Auction) -> int:
    """Public price before this bid: current_bid once bidding has started, else starting_bid."""
    return auction.current_bid if auction.bid_count > 0 else auction.starting_bid


def minimum_bid(auction: Auction) -> int:
    floor = price_floor(auction)
    return floor + bid_increment(floor)


def check_minimum_bid(auction: Auction, max_bid_amount: int) -> None:
    required = minimum_bid(auction)
    if max_bid_amount < required:
        raise BidTooLowError(required)
