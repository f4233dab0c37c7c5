"""Winner determination at auction close."""

from src.am_auction.domain.models import Auction, Bid


def reserve_satisfied(auction: Auction) -> bool:
    # reserve_met is a cached projection; the live comparison decides
    return auction.reserve_met or auction.current_bid >= auction.reserve_price


def determine_winner(auction: Auction, top_bid: Bid | None) -> Bid | None:
    """Top public bid wins iff it exists and the reserve is satisfied."""
    if top_bid is None or not reserve_satisfied(auction):
        return None
    return top_bid
