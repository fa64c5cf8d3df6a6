"""Pydantic schemas for ap_asset API requests/responses.

`status` in responses is the effective status: an open asset whose end_at
has passed is reported as "ended" even before the clock has persisted the
transition.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from src.ap_asset.domain.models import Asset
from src.ap_bidding.domain.clock import auction_phase, format_countdown, is_expired, time_remaining
from src.ap_common.datetime_utils import ensure_utc
from src.ap_common.enums import AssetStatus
from src.ap_common.money import format_amount


class CreateAssetRequest(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    category: str | None = Field(None, max_length=64)
    starting_bid: int = Field(ge=0)
    end_at: datetime

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v

    @field_validator("end_at")
    @classmethod
    def to_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class AssetResponse(BaseModel):
    id: str
    owner_id: str
    title: str
    category: str | None
    starting_bid: int
    current_bid: int
    current_bid_display: str
    highest_bidder_id: str | None
    status: str
    phase: str
    time_remaining: str
    end_at: str
    last_bid_at: str | None
    created_at: str

    @classmethod
    def from_domain(cls, a: Asset, now: datetime, ending_soon_seconds: int) -> "AssetResponse":
        status = a.status
        if status == AssetStatus.OPEN and is_expired(a, now):
            status = AssetStatus.ENDED
        return cls(
            id=a.id,
            owner_id=a.owner_id,
            title=a.title,
            category=a.category,
            starting_bid=a.starting_bid,
            current_bid=a.current_bid,
            current_bid_display=format_amount(a.current_bid),
            highest_bidder_id=a.highest_bidder_id,
            status=status.value,
            phase=auction_phase(a, now, ending_soon_seconds).value,
            time_remaining=format_countdown(time_remaining(a, now)),
            end_at=a.end_at.isoformat(),
            last_bid_at=a.last_bid_at.isoformat() if a.last_bid_at else None,
            created_at=a.created_at.isoformat(),
        )


class AssetListResponse(BaseModel):
    items: list[AssetResponse]
