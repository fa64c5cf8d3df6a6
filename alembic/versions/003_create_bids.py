"""003: create bids table (append-only ledger)

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE bids (
            id              VARCHAR(64)     PRIMARY KEY,
            asset_id        VARCHAR(64)     NOT NULL REFERENCES assets (id),
            bidder_id       VARCHAR(128)    NOT NULL,
            amount          BIGINT          NOT NULL,
            outcome         VARCHAR(20)     NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_bids_amount_gt_0 CHECK (amount > 0),
            CONSTRAINT ck_bids_outcome CHECK (
                outcome IN ('accepted', 'rejected_low', 'rejected_closed')
            )
        );
    """)
    op.execute("CREATE INDEX idx_bids_asset_id ON bids (asset_id, id DESC);")
    op.execute("""
        CREATE INDEX idx_bids_asset_accepted
        ON bids (asset_id, amount DESC)
        WHERE outcome = 'accepted';
    """)
    op.execute("""
        CREATE TRIGGER trg_bids_append_only
            BEFORE UPDATE OR DELETE ON bids
            FOR EACH ROW EXECUTE FUNCTION fn_reject_mutation();
    """)
    op.execute("COMMENT ON TABLE bids IS 'Bid ledger — Append-Only, one row per attempt';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bids CASCADE;")
