"""005: create payment_profiles and payout_accounts tables

Revision ID: 005
Revises: 004
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE payment_profiles (
            user_id             UUID            PRIMARY KEY REFERENCES users (id),
            payment_method_ref  VARCHAR(255),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("""
        CREATE TABLE payout_accounts (
            seller_id           UUID            PRIMARY KEY REFERENCES users (id),
            account_ref         VARCHAR(255)    NOT NULL,
            payouts_enabled     BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    for table in ("payment_profiles", "payout_accounts"):
        op.execute(f"""
            CREATE TRIGGER trg_{table}_updated_at
                BEFORE UPDATE ON {table}
                FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
        """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS payout_accounts CASCADE;")
    op.execute("DROP TABLE IF EXISTS payment_profiles CASCADE;")
