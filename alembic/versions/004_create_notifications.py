"""004: create notifications table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE notifications (
            id              VARCHAR(64)     PRIMARY KEY,
            recipient_id    VARCHAR(128)    NOT NULL,
            type            VARCHAR(20)     NOT NULL,
            asset_id        VARCHAR(64)     NOT NULL,
            bid_id          VARCHAR(64)     NOT NULL,
            amount          BIGINT          NOT NULL,
            message         VARCHAR(1000)   NOT NULL,
            read            BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_notifications_type CHECK (type IN ('new_bid', 'outbid')),
            CONSTRAINT uq_notifications_bid_recipient UNIQUE (bid_id, recipient_id)
        );
    """)
    op.execute("""
        CREATE INDEX idx_notifications_recipient
        ON notifications (recipient_id, created_at DESC);
    """)
    op.execute("""
        CREATE INDEX idx_notifications_unread
        ON notifications (recipient_id)
        WHERE read = FALSE;
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS notifications CASCADE;")
