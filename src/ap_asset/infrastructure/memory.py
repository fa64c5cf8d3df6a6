"""In-memory AssetRepository for demo mode and tests.

Stores copies so callers mutating a returned Asset never change stored
state without going through update_bid_state / mark_ended.
"""

from dataclasses import replace
from datetime import datetime
from typing import Any

from src.ap_asset.domain.models import Asset
from src.ap_common.datetime_utils import utc_now
from src.ap_common.enums import AssetStatus


class InMemoryAssetRepository:
    def __init__(self) -> None:
        self._assets: dict[str, Asset] = {}

    async def create(self, asset: Asset, db: Any = None) -> None:
        if asset.id in self._assets:
            raise ValueError(f"Asset {asset.id} already exists")
        self._assets[asset.id] = replace(asset)

    async def get_by_id(self, asset_id: str, db: Any = None) -> Asset | None:
        asset = self._assets.get(asset_id)
        return replace(asset) if asset else None

    async def get_for_update(self, asset_id: str, db: Any = None) -> Asset | None:
        # Serialization comes from the engine's per-asset lock.
        return await self.get_by_id(asset_id, db)

    async def update_bid_state(self, asset: Asset, db: Any = None) -> None:
        stored = self._assets[asset.id]
        if stored.status != AssetStatus.OPEN:
            return
        stored.current_bid = asset.current_bid
        stored.highest_bidder_id = asset.highest_bidder_id
        stored.last_bid_at = asset.last_bid_at
        stored.updated_at = utc_now()

    async def mark_ended(self, asset: Asset, db: Any = None) -> None:
        stored = self._assets[asset.id]
        if stored.status == AssetStatus.OPEN:
            stored.status = AssetStatus.ENDED
            stored.updated_at = utc_now()

    async def list_assets(
        self, status: str | None, limit: int, db: Any = None
    ) -> list[Asset]:
        assets = [
            a for a in self._assets.values()
            if status is None or a.status.value == status
        ]
        assets.sort(key=lambda a: (a.end_at, a.id))
        return [replace(a) for a in assets[:limit]]

    async def list_due_for_expiry(
        self, now: datetime, limit: int, db: Any = None
    ) -> list[str]:
        due = [
            a for a in self._assets.values()
            if a.status == AssetStatus.OPEN and a.end_at <= now
        ]
        due.sort(key=lambda a: a.end_at)
        return [a.id for a in due[:limit]]
