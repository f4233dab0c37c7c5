"""Domain models for am_settlement — pure dataclasses."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class PaymentSplitRequest:
    """Charge the buyer, route proceeds to the seller minus the platform fee."""

    amount: int  # pence
    currency: str
    buyer_payment_method_ref: str
    seller_payout_account_ref: str
    platform_fee_bps: int
    platform_fee_amount: int  # pence, ceil(amount * bps / 10000)
    idempotency_key: str
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def platform_fee_fraction(self) -> float:
        return self.platform_fee_bps / 10_000


@dataclass(frozen=True)
class PaymentConfirmation:
    payment_id: str
    amount: int
    platform_fee_amount: int


@dataclass(frozen=True)
class OrderDraft:
    auction_id: str
    listing_id: str
    buyer_id: str
    seller_id: str
    total_amount: int  # pence
    platform_fee_amount: int
    payment_reference: str


@dataclass
class SettlementResult:
    auction_id: str
    listing_id: str | None = None
    status: str | None = None
    winner_id: str | None = None
    payment_processed: bool = False
    order_id: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.error is not None:
            return {"auction_id": self.auction_id, "error": self.error}
        return {
            "auction_id": self.auction_id,
            "listing_id": self.listing_id,
            "status": self.status,
            "winner_id": self.winner_id,
            "payment_processed": self.payment_processed,
            "order_id": self.order_id,
        }
