"""Listing status and order creation (raw SQL).

create_order is idempotent on auction_id (UNIQUE constraint): a replayed
settlement returns the existing order instead of inserting a second one.
"""

import uuid

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.enums import OrderStatus, PaymentStatus
from src.am_settlement.domain.models import OrderDraft

_SET_LISTING_STATUS_SQL = text("""
    UPDATE listings SET status = :status, updated_at = NOW()
    WHERE id = :listing_id
""")

_INSERT_ORDER_SQL = text("""
    INSERT INTO orders (id, auction_id, listing_id, buyer_id, seller_id,
                        total_amount, platform_fee_amount,
                        payment_status, order_status, payment_reference)
    VALUES (:id, :auction_id, :listing_id, :buyer_id, :seller_id,
            :total_amount, :platform_fee_amount,
            :payment_status, :order_status, :payment_reference)
    ON CONFLICT (auction_id) DO NOTHING
    RETURNING id
""")

_GET_ORDER_BY_AUCTION_SQL = text("SELECT id FROM orders WHERE auction_id = :auction_id")


class ListingOrderStore:
    async def set_listing_status(
        self, db: AsyncSession, listing_id: str, status: str
    ) -> None:
        await db.execute(_SET_LISTING_STATUS_SQL, {"listing_id": listing_id, "status": status})

    async def create_order(self, db: AsyncSession, draft: OrderDraft) -> str:
        result = await db.execute(
            _INSERT_ORDER_SQL,
            {
                "id": str(uuid.uuid4()),
                "auction_id": draft.auction_id,
                "listing_id": draft.listing_id,
                "buyer_id": draft.buyer_id,
                "seller_id": draft.seller_id,
                "total_amount": draft.total_amount,
                "platform_fee_amount": draft.platform_fee_amount,
                "payment_status": PaymentStatus.PAID.value,
                "order_status": OrderStatus.AWAITING_SHIPMENT.value,
                "payment_reference": draft.payment_reference,
            },
        )
        order_id = result.scalar_one_or_none()
        if order_id is None:
            existing = await db.execute(
                _GET_ORDER_BY_AUCTION_SQL, {"auction_id": draft.auction_id}
            )
            order_id = existing.scalar_one()
        return str(order_id)
