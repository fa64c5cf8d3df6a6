"""002: create assets table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE assets (
            id                  VARCHAR(64)     PRIMARY KEY,
            owner_id            VARCHAR(128)    NOT NULL,
            title               VARCHAR(500)    NOT NULL,
            category            VARCHAR(64),
            starting_bid        BIGINT          NOT NULL,
            current_bid         BIGINT          NOT NULL,
            highest_bidder_id   VARCHAR(128),
            end_at              TIMESTAMPTZ     NOT NULL,
            status              VARCHAR(10)     NOT NULL DEFAULT 'open',
            last_bid_at         TIMESTAMPTZ,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_assets_starting_bid_gte_0  CHECK (starting_bid >= 0),
            CONSTRAINT ck_assets_current_gte_start   CHECK (current_bid >= starting_bid),
            CONSTRAINT ck_assets_status              CHECK (status IN ('open', 'ended'))
        );
    """)
    op.execute("CREATE INDEX idx_assets_open_end_at ON assets (end_at) WHERE status = 'open';")
    op.execute("CREATE INDEX idx_assets_owner ON assets (owner_id);")
    op.execute("""
        CREATE TRIGGER trg_assets_updated_at
            BEFORE UPDATE ON assets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE assets IS 'Auctioned assets: current bid state, end_at fixed';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS assets CASCADE;")
