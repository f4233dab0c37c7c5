"""006: create orders table

Revision ID: 006
Revises: 005
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id                  UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            auction_id          UUID            NOT NULL REFERENCES auctions (id),
            listing_id          UUID            NOT NULL REFERENCES listings (id),
            buyer_id            UUID            NOT NULL REFERENCES users (id),
            seller_id           UUID            NOT NULL REFERENCES users (id),
            total_amount        BIGINT          NOT NULL,
            platform_fee_amount BIGINT          NOT NULL DEFAULT 0,
            payment_status      VARCHAR(20)     NOT NULL,
            order_status        VARCHAR(30)     NOT NULL,
            payment_reference   VARCHAR(255),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_orders_auction        UNIQUE (auction_id),
            CONSTRAINT ck_orders_amount_gt_0    CHECK (total_amount > 0),
            CONSTRAINT ck_orders_payment_status CHECK (payment_status IN ('pending', 'paid')),
            CONSTRAINT ck_orders_order_status   CHECK (
                order_status IN ('awaiting_shipment', 'shipped', 'delivered')
            )
        );
    """)
    op.execute("CREATE INDEX idx_orders_buyer ON orders (buyer_id, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE orders IS 'Settled auction sales; at most one per auction';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
