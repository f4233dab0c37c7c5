"""002: create listings table

Revision ID: 002
Revises: 001
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE listings (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            seller_id       UUID            NOT NULL REFERENCES users (id),
            title           VARCHAR(500)    NOT NULL,
            status          VARCHAR(20)     NOT NULL DEFAULT 'draft',
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_listings_status CHECK (status IN ('draft', 'published', 'sold'))
        );
    """)
    op.execute("CREATE INDEX idx_listings_seller ON listings (seller_id);")
    op.execute("""
        CREATE TRIGGER trg_listings_updated_at
            BEFORE UPDATE ON listings
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE listings IS 'Sellable items; catalog fields are owned by the catalog service';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS listings CASCADE;")
