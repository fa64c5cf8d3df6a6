"""AssetApplicationService — listing creation and read views.

Listing creation is a thin entry point so sheriffs can open auctions
end-to-end; after creation only the bid engine and the auction clock
mutate an asset.
"""

from datetime import datetime

from config.settings import settings
from src.ap_asset.application.schemas import (
    AssetListResponse,
    AssetResponse,
    CreateAssetRequest,
)
from src.ap_asset.domain.models import Asset
from src.ap_common.datetime_utils import utc_now
from src.ap_common.enums import AssetStatus
from src.ap_common.errors import AssetNotFoundError, InvalidAssetError
from src.ap_common.id_generator import generate_id
from src.ap_storage.backend import Storage, get_storage


class AssetApplicationService:
    def __init__(self, storage: Storage | None = None) -> None:
        self._storage = storage

    @property
    def storage(self) -> Storage:
        return self._storage or get_storage()

    async def create_asset(
        self, req: CreateAssetRequest, owner_id: str, now: datetime | None = None
    ) -> AssetResponse:
        created_at = now or utc_now()
        if req.end_at <= created_at:
            raise InvalidAssetError("end_at must be in the future")

        asset = Asset(
            id=generate_id("ast_"),
            owner_id=owner_id,
            title=req.title,
            category=req.category,
            starting_bid=req.starting_bid,
            current_bid=req.starting_bid,
            highest_bidder_id=None,
            end_at=req.end_at,
            status=AssetStatus.OPEN,
            last_bid_at=None,
            created_at=created_at,
            updated_at=created_at,
        )
        storage = self.storage
        async with storage.transaction() as db:
            await storage.assets.create(asset, db)
        return AssetResponse.from_domain(asset, created_at, settings.ENDING_SOON_SECONDS)

    async def get_asset(self, asset_id: str, now: datetime | None = None) -> AssetResponse:
        storage = self.storage
        async with storage.transaction() as db:
            asset = await storage.assets.get_by_id(asset_id, db)
        if asset is None:
            raise AssetNotFoundError(asset_id)
        return AssetResponse.from_domain(asset, now or utc_now(), settings.ENDING_SOON_SECONDS)

    async def list_assets(
        self, status: str | None, limit: int, now: datetime | None = None
    ) -> AssetListResponse:
        storage = self.storage
        async with storage.transaction() as db:
            assets = await storage.assets.list_assets(status, limit, db)
        read_at = now or utc_now()
        return AssetListResponse(
            items=[
                AssetResponse.from_domain(a, read_at, settings.ENDING_SOON_SECONDS)
                for a in assets
            ]
        )
