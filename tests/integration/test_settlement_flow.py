# tests/integration/test_settlement_flow.py
"""Integration tests for settlement against PostgreSQL.

The payment processor is replaced by an in-memory gateway; everything
else (claim and completion transactions, order insert, listing status,
notification outbox) runs real SQL.
"""

from decimal import Decimal

import pytest
from sqlalchemy import text

from src.am_bidding.application.schemas import PlaceBidRequest
from src.am_bidding.application.service import BiddingService
from src.am_settlement.application.job import SettlementJob
from src.am_settlement.domain.models import OrderDraft, PaymentConfirmation
from src.am_settlement.infrastructure.listing_orders import ListingOrderStore
from src.am_settlement.infrastructure.notifications import SqlNotifier

pytestmark = [pytest.mark.integration, pytest.mark.asyncio(loop_scope="session")]


class RecordingGateway:
    def __init__(self) -> None:
        self.requests = []

    async def charge(self, request):
        self.requests.append(request)
        return PaymentConfirmation(
            payment_id=f"pay-{request.metadata['auction_id']}",
            amount=request.amount,
            platform_fee_amount=request.platform_fee_amount,
        )

    async def aclose(self) -> None:
        pass

    def charges_for(self, auction_id: str) -> list:
        return [r for r in self.requests if r.metadata["auction_id"] == auction_id]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _sold_auction(session_factory, seed):
    """Auction with two proxy bids, expired, both parties able to pay."""
    async with session_factory() as db:
        auction = await seed.auction(db)
        alice = await seed.user(db)
        bob = await seed.user(db)
        await seed.payment_method(db, bob, "pm_card_bob")
        await seed.payout_account(db, auction.seller_id, "acct_seller")
        await db.commit()

    for bidder, pounds in ((alice, "30.00"), (bob, "50.00")):
        async with session_factory() as db:
            await BiddingService().place_bid(
                PlaceBidRequest(auction_id=auction.auction_id, max_bid_amount=Decimal(pounds)),
                bidder,
                db,
            )

    async with session_factory() as db:
        await seed.expire(db, auction.auction_id)
        await db.commit()
    return auction, bob


async def _fetch_one(session_factory, sql: str, **params):
    async with session_factory() as db:
        result = await db.execute(text(sql), params)
        return result.fetchone()


def _result_for(results, auction_id: str):
    return next((r for r in results if r.auction_id == auction_id), None)


# ---------------------------------------------------------------------------
# TestSettlement
# ---------------------------------------------------------------------------


class TestSettlement:
    async def test_running_twice_creates_one_order(self, session_factory, seed) -> None:
        auction, bob = await _sold_auction(session_factory, seed)
        gateway = RecordingGateway()
        job = SettlementJob(session_factory, gateway, SqlNotifier(session_factory))

        first = await job.process_expired_auctions()
        second = await job.process_expired_auctions()

        result = _result_for(first, auction.auction_id)
        assert result.status == "completed"
        assert result.winner_id == bob
        assert result.payment_processed is True
        assert _result_for(second, auction.auction_id) is None

        charges = gateway.charges_for(auction.auction_id)
        assert len(charges) == 1
        assert charges[0].amount == 3100
        assert charges[0].idempotency_key == f"auction-settlement-{auction.auction_id}"

        orders = await _fetch_one(
            session_factory,
            "SELECT COUNT(*) AS n, MIN(id::text) AS id, MIN(total_amount) AS total"
            " FROM orders WHERE auction_id = :id",
            id=auction.auction_id,
        )
        assert orders.n == 1
        assert orders.id == result.order_id
        assert orders.total == 3100

        row = await _fetch_one(
            session_factory,
            "SELECT a.status, a.winner_id::text AS winner_id, l.status AS listing_status"
            " FROM auctions a JOIN listings l ON l.id = a.listing_id WHERE a.id = :id",
            id=auction.auction_id,
        )
        assert (row.status, row.winner_id, row.listing_status) == ("completed", bob, "sold")

        kinds = await _fetch_one(
            session_factory,
            "SELECT array_agg(kind ORDER BY id) AS kinds FROM notifications"
            " WHERE context->>'auction_id' = :id",
            id=auction.auction_id,
        )
        assert kinds.kinds == ["AUCTION_WON", "AUCTION_SOLD"]

    async def test_missing_payment_method_leaves_auction_ended(
        self, session_factory, seed
    ) -> None:
        async with session_factory() as db:
            auction = await seed.auction(db, reserve_price=0)
            alice = await seed.user(db)
            await seed.payout_account(db, auction.seller_id, "acct_seller")
            await db.commit()
        async with session_factory() as db:
            await BiddingService().place_bid(
                PlaceBidRequest(auction_id=auction.auction_id, max_bid_amount=Decimal("30.00")),
                alice,
                db,
            )
        async with session_factory() as db:
            await seed.expire(db, auction.auction_id)
            await db.commit()
        gateway = RecordingGateway()
        job = SettlementJob(session_factory, gateway, SqlNotifier(session_factory))

        results = await job.process_expired_auctions()

        result = _result_for(results, auction.auction_id)
        assert result.status == "ended"
        assert result.winner_id == alice
        assert result.payment_processed is False
        assert gateway.charges_for(auction.auction_id) == []
        row = await _fetch_one(
            session_factory,
            "SELECT status, winner_id::text AS winner_id FROM auctions WHERE id = :id",
            id=auction.auction_id,
        )
        assert (row.status, row.winner_id) == ("ended", alice)
        notice = await _fetch_one(
            session_factory,
            "SELECT recipient_id::text AS recipient_id, kind FROM notifications"
            " WHERE context->>'auction_id' = :id",
            id=auction.auction_id,
        )
        assert (notice.recipient_id, notice.kind) == (alice, "PAYMENT_ACTION_REQUIRED")

    async def test_create_order_twice_returns_existing_order(
        self, session_factory, seed
    ) -> None:
        async with session_factory() as db:
            auction = await seed.auction(db)
            buyer = await seed.user(db)
            await db.commit()
        draft = OrderDraft(
            auction_id=auction.auction_id,
            listing_id=auction.listing_id,
            buyer_id=buyer,
            seller_id=auction.seller_id,
            total_amount=3100,
            platform_fee_amount=155,
            payment_reference="pay-replayed",
        )

        order_ids = []
        for _ in range(2):
            async with session_factory() as db:
                order_ids.append(await ListingOrderStore().create_order(db, draft))
                await db.commit()

        assert order_ids[0] == order_ids[1]
        count = await _fetch_one(
            session_factory,
            "SELECT COUNT(*) AS n FROM orders WHERE auction_id = :id",
            id=auction.auction_id,
        )
        assert count.n == 1
