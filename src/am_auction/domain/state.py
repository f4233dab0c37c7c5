"""Auction lifecycle: scheduled → active → ended → completed.

`ended` is where settlement parks an auction before money moves, so a
second settlement pass (which only picks up `active` rows) cannot pay twice.
It is terminal for no-sale and manual-payment outcomes.
"""

from datetime import datetime

from src.am_auction.domain.models import Auction
from src.am_common.datetime_utils import as_utc
from src.am_common.enums import AuctionStatus
from src.am_common.errors import InvalidAuctionTransitionError

_ALLOWED: dict[AuctionStatus, frozenset[AuctionStatus]] = {
    AuctionStatus.SCHEDULED: frozenset({AuctionStatus.ACTIVE}),
    AuctionStatus.ACTIVE: frozenset({AuctionStatus.ENDED}),
    AuctionStatus.ENDED: frozenset({AuctionStatus.COMPLETED}),
    AuctionStatus.COMPLETED: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    try:
        return AuctionStatus(target) in _ALLOWED[AuctionStatus(current)]
    except ValueError:
        return False


def ensure_transition(current: str, target: str) -> None:
    if not can_transition(current, target):
        raise InvalidAuctionTransitionError(current, target)


def is_open_for_bidding(auction: Auction, now: datetime) -> bool:
    return auction.status == AuctionStatus.ACTIVE and as_utc(now) < as_utc(auction.end_time)


def is_due_for_settlement(auction: Auction, now: datetime) -> bool:
    return auction.status == AuctionStatus.ACTIVE and as_utc(auction.end_time) < as_utc(now)
