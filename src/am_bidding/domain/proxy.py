"""Proxy arbitration — pure function over an auction snapshot and its ledger.

Each bidder discloses a secret ceiling once; the public price is the least
amount that keeps the strongest ceiling ahead of the runner-up:

  no competitor         → starting bid (or one increment from zero)
  caller beats top      → top ceiling + increment(top ceiling), caller leads
  exact tie on ceilings → the tied value; earliest first bid keeps the lead
  caller below top      → caller ceiling + increment(caller ceiling), top leads

The result is floored at the previous public price and clamped to the
leader's ceiling. No I/O here; the caller supplies a locked snapshot.
"""

from dataclasses import dataclass
from datetime import datetime

from src.am_auction.domain.models import Auction, Bid, rank_bids
from src.am_bidding.domain.increment import bid_increment


@dataclass(frozen=True)
class ArbitrationResult:
    new_current_bid: int
    leader_id: str
    is_leading: bool
    reserve_met: bool
    bid_count: int
    is_first_bid: bool  # no ledger row yet for the caller
    caller_max_bid: int  # effective ceiling after this bid
    caller_bid_amount: int
    # Leading rival whose public amount moves with the new price, if any
    rival_leader_id: str | None
    rival_bid_amount: int | None
    created_at: datetime


def arbitrate(
    auction: Auction,
    bids: list[Bid],
    bidder_id: str,
    max_bid_amount: int,
    now: datetime,
) -> ArbitrationResult:
    ranked = rank_bids(bids)
    own = next((b for b in ranked if b.bidder_id == bidder_id), None)
    competing = [b for b in ranked if b.bidder_id != bidder_id]
    top = competing[0] if competing else None

    # Ceilings only go up
    ceiling = max(max_bid_amount, own.max_bid_amount) if own else max_bid_amount

    if top is None:
        new_current = auction.starting_bid if auction.starting_bid > 0 else bid_increment(0)
        leader_id, leader_max = bidder_id, ceiling
    elif ceiling > top.max_bid_amount:
        new_current = top.max_bid_amount + bid_increment(top.max_bid_amount)
        leader_id, leader_max = bidder_id, ceiling
    elif ceiling == top.max_bid_amount:
        new_current = ceiling
        if own is not None and own.created_at < top.created_at:
            leader_id, leader_max = bidder_id, ceiling
        else:
            leader_id, leader_max = top.bidder_id, top.max_bid_amount
    else:
        new_current = ceiling + bid_increment(ceiling)
        leader_id, leader_max = top.bidder_id, top.max_bid_amount

    new_current = max(new_current, auction.current_bid)
    new_current = min(new_current, leader_max)

    is_leading = leader_id == bidder_id
    if is_leading:
        caller_amount = new_current
        rival_id, rival_amount = None, None
    else:
        caller_amount = min(new_current, ceiling)
        rival_id, rival_amount = leader_id, new_current

    return ArbitrationResult(
        new_current_bid=new_current,
        leader_id=leader_id,
        is_leading=is_leading,
        reserve_met=new_current >= auction.reserve_price,
        bid_count=len(ranked) + (0 if own else 1),
        is_first_bid=own is None,
        caller_max_bid=ceiling,
        caller_bid_amount=caller_amount,
        rival_leader_id=rival_id,
        rival_bid_amount=rival_amount,
        created_at=own.created_at if own else now,
    )
