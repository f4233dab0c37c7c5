"""004: create bids table

Revision ID: 004
Revises: 003
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE bids (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            auction_id      UUID            NOT NULL REFERENCES auctions (id),
            bidder_id       UUID            NOT NULL REFERENCES users (id),
            bid_amount      BIGINT          NOT NULL,
            max_bid_amount  BIGINT          NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_bids_auction_bidder   UNIQUE (auction_id, bidder_id),
            CONSTRAINT ck_bids_amount_gt_0      CHECK (bid_amount > 0),
            CONSTRAINT ck_bids_public_lte_max   CHECK (bid_amount <= max_bid_amount)
        );
    """)
    op.execute(
        "CREATE INDEX idx_bids_auction_max ON bids (auction_id, max_bid_amount DESC, created_at ASC);"
    )
    op.execute(
        "CREATE INDEX idx_bids_auction_public ON bids (auction_id, bid_amount DESC, created_at ASC);"
    )
    op.execute("""
        CREATE TRIGGER trg_bids_updated_at
            BEFORE UPDATE ON bids
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE bids IS 'One row per bidder per auction; max_bid_amount never decreases';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bids CASCADE;")
