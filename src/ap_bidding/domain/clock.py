"""Auction clock — the open -> ended transition and the countdown view.

State machine per asset:

    open --(now >= end_at)--> ended

No other transition exists: no reopening, no extension on late bids.
Everything here is a pure function of (asset, now); the engine and the
sweeper decide when to call it and hold the per-asset lock while they do.
"""

from datetime import datetime, timedelta

from src.ap_asset.domain.models import Asset
from src.ap_common.enums import AssetStatus, AuctionPhase

_ZERO = timedelta(0)


def is_expired(asset: Asset, now: datetime) -> bool:
    return now >= asset.end_at


def apply_clock(asset: Asset, now: datetime) -> bool:
    """Flip an expired open asset to ended in place. Returns True if it flipped."""
    if asset.status == AssetStatus.OPEN and is_expired(asset, now):
        asset.status = AssetStatus.ENDED
        return True
    return False


def decision_time(asset: Asset, now: datetime) -> datetime:
    """Per-asset monotonic decision time: never earlier than the last accepted bid."""
    if asset.last_bid_at is not None and now < asset.last_bid_at:
        return asset.last_bid_at
    return now


def time_remaining(asset: Asset, now: datetime) -> timedelta:
    if asset.status == AssetStatus.ENDED:
        return _ZERO
    return max(asset.end_at - now, _ZERO)


def format_countdown(remaining: timedelta) -> str:
    """HH:MM:SS, hours not wrapped at 24 (a 2-day auction shows 48:00:00)."""
    total = max(int(remaining.total_seconds()), 0)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def auction_phase(asset: Asset, now: datetime, ending_soon_seconds: int) -> AuctionPhase:
    remaining = time_remaining(asset, now)
    if remaining <= _ZERO:
        return AuctionPhase.ENDED
    if remaining <= timedelta(seconds=ending_soon_seconds):
        return AuctionPhase.ENDING_SOON
    return AuctionPhase.ACTIVE
