"""BidLedger — PostgreSQL implementation of BidLedgerProtocol.

Called from BidEngine within the bid transaction; insert-only.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ap_bidding.domain.models import Bid
from src.ap_common.enums import BidOutcome

_INSERT_BID_SQL = text("""
    INSERT INTO bids (id, asset_id, bidder_id, amount, outcome, created_at)
    VALUES (:id, :asset_id, :bidder_id, :amount, :outcome, :created_at)
""")

_HIGHEST_ACCEPTED_SQL = text("""
    SELECT id, asset_id, bidder_id, amount, outcome, created_at
    FROM bids
    WHERE asset_id = :asset_id AND outcome = 'accepted'
    ORDER BY amount DESC, id DESC
    LIMIT 1
""")

_PRIOR_BIDDERS_SQL = text("""
    SELECT DISTINCT bidder_id
    FROM bids
    WHERE asset_id = :asset_id AND outcome = 'accepted'
""")

_LIST_FOR_ASSET_SQL = text("""
    SELECT id, asset_id, bidder_id, amount, outcome, created_at
    FROM bids
    WHERE asset_id = :asset_id
      AND (NOT CAST(:accepted_only AS BOOLEAN) OR outcome = 'accepted')
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_bid(row: object) -> Bid:
    return Bid(
        id=row.id,  # type: ignore[attr-defined]
        asset_id=row.asset_id,  # type: ignore[attr-defined]
        bidder_id=row.bidder_id,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        outcome=BidOutcome(row.outcome),  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class BidLedger:
    async def append(self, bid: Bid, db: AsyncSession) -> None:
        """Insert one row into bids within the caller's transaction."""
        await db.execute(
            _INSERT_BID_SQL,
            {
                "id": bid.id,
                "asset_id": bid.asset_id,
                "bidder_id": bid.bidder_id,
                "amount": bid.amount,
                "outcome": bid.outcome.value,
                "created_at": bid.created_at,
            },
        )

    async def highest_accepted(self, asset_id: str, db: AsyncSession) -> Bid | None:
        result = await db.execute(_HIGHEST_ACCEPTED_SQL, {"asset_id": asset_id})
        row = result.fetchone()
        return _row_to_bid(row) if row else None

    async def prior_bidders(self, asset_id: str, db: AsyncSession) -> set[str]:
        result = await db.execute(_PRIOR_BIDDERS_SQL, {"asset_id": asset_id})
        return {row.bidder_id for row in result.fetchall()}

    async def list_for_asset(
        self, asset_id: str, accepted_only: bool, limit: int, db: AsyncSession
    ) -> list[Bid]:
        result = await db.execute(
            _LIST_FOR_ASSET_SQL,
            {"asset_id": asset_id, "accepted_only": accepted_only, "limit": limit},
        )
        return [_row_to_bid(row) for row in result.fetchall()]
