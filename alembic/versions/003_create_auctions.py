"""003: create auctions table

Revision ID: 003
Revises: 002
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE auctions (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            listing_id      UUID            NOT NULL REFERENCES listings (id),
            starting_bid    BIGINT          NOT NULL DEFAULT 0,
            reserve_price   BIGINT          NOT NULL DEFAULT 0,
            current_bid     BIGINT          NOT NULL DEFAULT 0,
            bid_count       INT             NOT NULL DEFAULT 0,
            reserve_met     BOOLEAN         NOT NULL DEFAULT FALSE,
            status          VARCHAR(20)     NOT NULL DEFAULT 'scheduled',
            start_time      TIMESTAMPTZ,
            end_time        TIMESTAMPTZ     NOT NULL,
            winner_id       UUID            REFERENCES users (id),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_auctions_listing          UNIQUE (listing_id),
            CONSTRAINT ck_auctions_starting_gte_0   CHECK (starting_bid >= 0),
            CONSTRAINT ck_auctions_reserve_gte_0    CHECK (reserve_price >= 0),
            CONSTRAINT ck_auctions_current_gte_0    CHECK (current_bid >= 0),
            CONSTRAINT ck_auctions_bid_count_gte_0  CHECK (bid_count >= 0),
            CONSTRAINT ck_auctions_status CHECK (
                status IN ('scheduled', 'active', 'ended', 'completed')
            )
        );
    """)
    # Settlement scan: active auctions past end_time
    op.execute("CREATE INDEX idx_auctions_status_end ON auctions (status, end_time);")
    op.execute("""
        CREATE TRIGGER trg_auctions_updated_at
            BEFORE UPDATE ON auctions
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE auctions IS 'Timed sale of one listing; current_bid/bid_count are a projection of bids';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS auctions CASCADE;")
