"""AssetRepository — PostgreSQL implementation of AssetRepositoryProtocol.

All queries use raw text() SQL (no ORM). Writes run inside the caller's
transaction; this module never commits.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ap_asset.domain.models import Asset
from src.ap_common.enums import AssetStatus

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_COLUMNS = """
    id, owner_id, title, category,
    starting_bid, current_bid, highest_bidder_id,
    end_at, status, last_bid_at,
    created_at, updated_at
"""

_INSERT_ASSET_SQL = text("""
    INSERT INTO assets
        (id, owner_id, title, category,
         starting_bid, current_bid, highest_bidder_id,
         end_at, status, last_bid_at, created_at, updated_at)
    VALUES
        (:id, :owner_id, :title, :category,
         :starting_bid, :current_bid, :highest_bidder_id,
         :end_at, :status, :last_bid_at, :created_at, :updated_at)
""")

_GET_ASSET_SQL = text(f"SELECT {_COLUMNS} FROM assets WHERE id = :asset_id")

_GET_ASSET_FOR_UPDATE_SQL = text(
    f"SELECT {_COLUMNS} FROM assets WHERE id = :asset_id FOR UPDATE"
)

_UPDATE_BID_STATE_SQL = text("""
    UPDATE assets
    SET current_bid = :current_bid,
        highest_bidder_id = :highest_bidder_id,
        last_bid_at = :last_bid_at,
        updated_at = NOW()
    WHERE id = :id AND status = 'open'
""")

_MARK_ENDED_SQL = text("""
    UPDATE assets
    SET status = 'ended', updated_at = NOW()
    WHERE id = :id AND status = 'open'
""")

_LIST_ASSETS_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM assets
    WHERE CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT)
    ORDER BY end_at ASC, id ASC
    LIMIT :limit
""")

_LIST_DUE_SQL = text("""
    SELECT id
    FROM assets
    WHERE status = 'open' AND end_at <= :now
    ORDER BY end_at ASC
    LIMIT :limit
""")

# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_asset(row: object) -> Asset:
    return Asset(
        id=row.id,  # type: ignore[attr-defined]
        owner_id=row.owner_id,  # type: ignore[attr-defined]
        title=row.title,  # type: ignore[attr-defined]
        category=row.category,  # type: ignore[attr-defined]
        starting_bid=row.starting_bid,  # type: ignore[attr-defined]
        current_bid=row.current_bid,  # type: ignore[attr-defined]
        highest_bidder_id=row.highest_bidder_id,  # type: ignore[attr-defined]
        end_at=row.end_at,  # type: ignore[attr-defined]
        status=AssetStatus(row.status),  # type: ignore[attr-defined]
        last_bid_at=row.last_bid_at,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AssetRepository:
    async def create(self, asset: Asset, db: AsyncSession) -> None:
        await db.execute(
            _INSERT_ASSET_SQL,
            {
                "id": asset.id,
                "owner_id": asset.owner_id,
                "title": asset.title,
                "category": asset.category,
                "starting_bid": asset.starting_bid,
                "current_bid": asset.current_bid,
                "highest_bidder_id": asset.highest_bidder_id,
                "end_at": asset.end_at,
                "status": asset.status.value,
                "last_bid_at": asset.last_bid_at,
                "created_at": asset.created_at,
                "updated_at": asset.updated_at,
            },
        )

    async def get_by_id(self, asset_id: str, db: AsyncSession) -> Asset | None:
        result = await db.execute(_GET_ASSET_SQL, {"asset_id": asset_id})
        row = result.fetchone()
        return _row_to_asset(row) if row else None

    async def get_for_update(self, asset_id: str, db: AsyncSession) -> Asset | None:
        result = await db.execute(_GET_ASSET_FOR_UPDATE_SQL, {"asset_id": asset_id})
        row = result.fetchone()
        return _row_to_asset(row) if row else None

    async def update_bid_state(self, asset: Asset, db: AsyncSession) -> None:
        await db.execute(
            _UPDATE_BID_STATE_SQL,
            {
                "id": asset.id,
                "current_bid": asset.current_bid,
                "highest_bidder_id": asset.highest_bidder_id,
                "last_bid_at": asset.last_bid_at,
            },
        )

    async def mark_ended(self, asset: Asset, db: AsyncSession) -> None:
        await db.execute(_MARK_ENDED_SQL, {"id": asset.id})

    async def list_assets(
        self, status: str | None, limit: int, db: AsyncSession
    ) -> list[Asset]:
        result = await db.execute(_LIST_ASSETS_SQL, {"status": status, "limit": limit})
        return [_row_to_asset(row) for row in result.fetchall()]

    async def list_due_for_expiry(
        self, now: datetime, limit: int, db: AsyncSession
    ) -> list[str]:
        result = await db.execute(_LIST_DUE_SQL, {"now": now, "limit": limit})
        return [row.id for row in result.fetchall()]
