"""Unit tests for settlement persistence adapters with mocked sessions."""

import json
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.exc import OperationalError

from src.am_settlement.domain.models import OrderDraft
from src.am_settlement.infrastructure.listing_orders import ListingOrderStore
from src.am_settlement.infrastructure.notifications import SqlNotifier
from src.am_settlement.infrastructure.payment_accounts import PaymentAccountRepository


def _draft() -> OrderDraft:
    return OrderDraft(
        auction_id="auc-1", listing_id="lst-1", buyer_id="B", seller_id="S",
        total_amount=3100, platform_fee_amount=155, payment_reference="pay_1",
    )


def _scalar(value):
    result = MagicMock()
    result.scalar_one_or_none = MagicMock(return_value=value)
    result.scalar_one = MagicMock(return_value=value)
    return result


class _Session:
    def __init__(self, execute: AsyncMock) -> None:
        self.execute = execute
        self.commit = AsyncMock()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class TestCreateOrder:
    async def test_new_order(self) -> None:
        db = MagicMock()
        db.execute = AsyncMock(return_value=_scalar("ord-1"))

        assert await ListingOrderStore().create_order(db, _draft()) == "ord-1"

        params = db.execute.await_args.args[1]
        assert params["payment_status"] == "paid"
        assert params["order_status"] == "awaiting_shipment"
        assert params["total_amount"] == 3100

    async def test_replay_returns_existing_order(self) -> None:
        db = MagicMock()
        db.execute = AsyncMock(side_effect=[_scalar(None), _scalar("ord-existing")])

        assert await ListingOrderStore().create_order(db, _draft()) == "ord-existing"
        assert db.execute.await_count == 2


class TestPaymentAccounts:
    async def test_missing_payment_method_is_none(self) -> None:
        db = MagicMock()
        db.execute = AsyncMock(return_value=_scalar(None))
        assert await PaymentAccountRepository().get_payment_method_ref(db, "B") is None

    async def test_payout_account_requires_enabled_payouts(self) -> None:
        db = MagicMock()
        db.execute = AsyncMock(return_value=_scalar("acct_1"))

        assert await PaymentAccountRepository().get_payout_account_ref(db, "S") == "acct_1"
        assert "payouts_enabled" in str(db.execute.await_args.args[0])


class TestSqlNotifier:
    async def test_writes_outbox_row(self) -> None:
        session = _Session(AsyncMock())
        notifier = SqlNotifier(lambda: session)

        await notifier.notify("B", "AUCTION_WON", {"auction_id": "auc-1", "amount_pence": 3100})

        params = session.execute.await_args.args[1]
        assert params["recipient_id"] == "B"
        assert params["kind"] == "AUCTION_WON"
        assert json.loads(params["context"])["amount_pence"] == 3100
        session.commit.assert_awaited_once()

    async def test_database_failure_is_logged_not_raised(self) -> None:
        session = _Session(AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("down"))))
        notifier = SqlNotifier(lambda: session)

        await notifier.notify("B", "AUCTION_WON", {})

        session.commit.assert_not_awaited()
