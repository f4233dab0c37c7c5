"""Tests for proxy arbitration (pure function, no I/O)."""

from datetime import UTC, datetime, timedelta

from src.am_auction.domain.models import Auction, Bid
from src.am_bidding.domain.proxy import arbitrate

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _make_auction(**kwargs) -> Auction:
    defaults = dict(
        id="auc-1", listing_id="lst-1", seller_id="seller", listing_title="Lamp",
        starting_bid=0, reserve_price=2000, current_bid=0, bid_count=0,
        reserve_met=False, status="active", end_time=T0 + timedelta(days=1),
        winner_id=None, created_at=T0, updated_at=T0,
    )
    defaults.update(kwargs)
    return Auction(**defaults)


def _bid(bidder: str, max_bid: int, amount: int, minute: int) -> Bid:
    at = T0 + timedelta(minutes=minute)
    return Bid(
        id=f"bid-{bidder}", auction_id="auc-1", bidder_id=bidder,
        bid_amount=amount, max_bid_amount=max_bid, created_at=at, updated_at=at,
    )


class TestFirstBid:
    def test_zero_start_opens_at_one_increment(self) -> None:
        r = arbitrate(_make_auction(), [], "A", 3000, T0)
        assert r.new_current_bid == 100
        assert r.is_leading
        assert r.reserve_met is False
        assert r.bid_count == 1
        assert r.is_first_bid
        assert r.caller_bid_amount == 100
        assert r.caller_max_bid == 3000

    def test_opens_at_starting_bid(self) -> None:
        r = arbitrate(_make_auction(starting_bid=1500), [], "A", 3000, T0)
        assert r.new_current_bid == 1500

    def test_reserve_met_on_opening_price(self) -> None:
        r = arbitrate(_make_auction(starting_bid=2500), [], "A", 3000, T0)
        assert r.reserve_met is True

    def test_created_at_is_now_for_new_bidder(self) -> None:
        r = arbitrate(_make_auction(), [], "A", 3000, T0)
        assert r.created_at == T0


class TestOutbid:
    def test_higher_ceiling_takes_lead_one_step_above_rival(self) -> None:
        # A max £30 at £1; B max £50 → 30 + increment(30) = £31, B leads
        auction = _make_auction(current_bid=100, bid_count=1)
        bids = [_bid("A", 3000, 100, 0)]
        r = arbitrate(auction, bids, "B", 5000, T0 + timedelta(minutes=5))
        assert r.new_current_bid == 3100
        assert r.leader_id == "B"
        assert r.is_leading
        assert r.reserve_met is True
        assert r.bid_count == 2
        assert r.caller_bid_amount == 3100
        assert r.rival_leader_id is None

    def test_price_clamped_to_new_leader_ceiling(self) -> None:
        # 3000 + 100 would exceed B's own £30.50
        auction = _make_auction(current_bid=100, bid_count=1)
        bids = [_bid("A", 3000, 100, 0)]
        r = arbitrate(auction, bids, "B", 3050, T0)
        assert r.new_current_bid == 3050
        assert r.is_leading

    def test_lower_ceiling_pushes_leader_up(self) -> None:
        # A max £100; B max £60 → 60 + increment(60) = £62, A keeps lead
        auction = _make_auction(current_bid=100, bid_count=1)
        bids = [_bid("A", 10_000, 100, 0)]
        r = arbitrate(auction, bids, "B", 6000, T0 + timedelta(minutes=1))
        assert r.new_current_bid == 6200
        assert r.leader_id == "A"
        assert not r.is_leading
        assert r.rival_leader_id == "A"
        assert r.rival_bid_amount == 6200
        # Outbid caller is recorded at their own ceiling, never above it
        assert r.caller_bid_amount == 6000

    def test_lower_ceiling_clamped_to_leader_max(self) -> None:
        # 6100 + increment(6100) = 6300 > A's 6200
        auction = _make_auction(current_bid=100, bid_count=1)
        bids = [_bid("A", 6200, 100, 0)]
        r = arbitrate(auction, bids, "B", 6100, T0)
        assert r.new_current_bid == 6200
        assert r.leader_id == "A"


class TestTie:
    def test_exact_tie_earlier_bidder_keeps_lead(self) -> None:
        auction = _make_auction(current_bid=100, bid_count=1)
        bids = [_bid("A", 10_000, 100, 0)]
        r = arbitrate(auction, bids, "B", 10_000, T0 + timedelta(minutes=2))
        assert r.new_current_bid == 10_000
        assert r.leader_id == "A"
        assert not r.is_leading
        assert r.caller_bid_amount == 10_000
        assert r.rival_bid_amount == 10_000

    def test_tie_is_deterministic_when_earlier_bidder_raises_to_match(self) -> None:
        # A bid first at £50, B later at £80; A raising to £80 ties with
        # the earlier created_at and takes the lead
        auction = _make_auction(current_bid=5000, bid_count=2)
        bids = [_bid("B", 8000, 5000, 3), _bid("A", 5000, 5000, 0)]
        r = arbitrate(auction, bids, "A", 8000, T0 + timedelta(minutes=9))
        assert r.new_current_bid == 8000
        assert r.leader_id == "A"
        assert not r.is_first_bid
        assert r.created_at == T0


class TestRepeatBidder:
    def test_leader_raising_own_ceiling_keeps_price(self) -> None:
        auction = _make_auction(current_bid=100, bid_count=1)
        bids = [_bid("A", 3000, 100, 0)]
        r = arbitrate(auction, bids, "A", 4000, T0 + timedelta(minutes=1))
        assert r.new_current_bid == 100
        assert r.bid_count == 1
        assert r.caller_max_bid == 4000
        assert not r.is_first_bid

    def test_ceiling_never_decreases(self) -> None:
        auction = _make_auction(current_bid=100, bid_count=1)
        bids = [_bid("A", 3000, 100, 0)]
        r = arbitrate(auction, bids, "A", 2000, T0 + timedelta(minutes=1))
        assert r.caller_max_bid == 3000

    def test_price_never_falls_below_previous(self) -> None:
        # Stale projection above what the ledger would compute
        auction = _make_auction(current_bid=4000, bid_count=2)
        bids = [_bid("A", 10_000, 4000, 0), _bid("B", 3500, 3500, 1)]
        r = arbitrate(auction, bids, "B", 3600, T0 + timedelta(minutes=4))
        assert r.new_current_bid >= 4000

    def test_bid_count_counts_distinct_bidders(self) -> None:
        auction = _make_auction(current_bid=3100, bid_count=2)
        bids = [_bid("B", 5000, 3100, 1), _bid("A", 3000, 100, 0)]
        r = arbitrate(auction, bids, "A", 7000, T0 + timedelta(minutes=6))
        assert r.bid_count == 2
        assert r.is_leading
        assert r.new_current_bid == 5000 + 200
