"""Outbound collaborators the settlement job depends on.

Each is a Protocol so the job can be driven by fakes in tests and by the
SQL / HTTP adapters in am_settlement.infrastructure in production.
"""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_settlement.domain.models import (
    OrderDraft,
    PaymentConfirmation,
    PaymentSplitRequest,
)


class PaymentSplitGateway(Protocol):
    async def charge(self, request: PaymentSplitRequest) -> PaymentConfirmation:
        """Raise NoPaymentMethodError, ChargeDeclinedError,
        DestinationAccountNotReadyError or PaymentGatewayUnavailableError."""
        ...

    async def aclose(self) -> None: ...


class Notifier(Protocol):
    async def notify(self, recipient_id: str, kind: str, context: dict[str, Any]) -> None:
        """Fire-and-forget; must not raise."""
        ...


class PaymentAccountsProtocol(Protocol):
    async def get_payment_method_ref(self, db: AsyncSession, user_id: str) -> str | None: ...

    async def get_payout_account_ref(self, db: AsyncSession, seller_id: str) -> str | None:
        """Only returns accounts able to receive transfers."""
        ...


class ListingOrderStoreProtocol(Protocol):
    async def set_listing_status(
        self, db: AsyncSession, listing_id: str, status: str
    ) -> None: ...

    async def create_order(self, db: AsyncSession, draft: OrderDraft) -> str:
        """Idempotent on draft.auction_id; returns the (possibly existing) order id."""
        ...
