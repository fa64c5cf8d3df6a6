"""Domain models for ap_asset — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime

from src.ap_common.enums import AssetStatus


@dataclass
class Asset:
    """Per-asset current bid state. The single source of truth for "current"."""

    id: str
    owner_id: str
    title: str
    category: str | None
    starting_bid: int
    current_bid: int
    highest_bidder_id: str | None
    end_at: datetime
    status: AssetStatus
    last_bid_at: datetime | None
    created_at: datetime
    updated_at: datetime

    @property
    def is_open(self) -> bool:
        return self.status == AssetStatus.OPEN
