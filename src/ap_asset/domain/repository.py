# src/ap_asset/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

`db` is the opaque transaction handle yielded by Storage.transaction():
an AsyncSession for the postgres backend, None for the memory backend.
"""

from datetime import datetime
from typing import Any, Protocol

from src.ap_asset.domain.models import Asset


class AssetRepositoryProtocol(Protocol):
    async def create(self, asset: Asset, db: Any) -> None: ...

    async def get_by_id(self, asset_id: str, db: Any) -> Asset | None: ...

    async def get_for_update(self, asset_id: str, db: Any) -> Asset | None:
        """Read the asset and hold its row lock until the transaction ends."""
        ...

    async def update_bid_state(self, asset: Asset, db: Any) -> None:
        """Persist current_bid, highest_bidder_id, last_bid_at."""
        ...

    async def mark_ended(self, asset: Asset, db: Any) -> None: ...

    async def list_assets(
        self, status: str | None, limit: int, db: Any
    ) -> list[Asset]: ...

    async def list_due_for_expiry(
        self, now: datetime, limit: int, db: Any
    ) -> list[str]:
        """IDs of open assets whose end_at <= now."""
        ...
