"""007: create notifications table

Revision ID: 007
Revises: 006
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE notifications (
            id              BIGSERIAL       PRIMARY KEY,
            recipient_id    UUID            NOT NULL,
            kind            VARCHAR(40)     NOT NULL,
            context         JSONB           NOT NULL DEFAULT '{}'::jsonb,
            delivered_at    TIMESTAMPTZ,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute(
        "CREATE INDEX idx_notifications_undelivered ON notifications (created_at)"
        " WHERE delivered_at IS NULL;"
    )
    op.execute("COMMENT ON TABLE notifications IS 'Outbox of user-facing events; rendered and sent by the messaging service';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS notifications CASCADE;")
