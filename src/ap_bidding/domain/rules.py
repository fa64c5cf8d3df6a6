"""Bid validation rules — pure functions over an Asset snapshot.

Checked in order by evaluate_bid:
  1. auction open:      status == open and now < end_at  -> else REJECTED_CLOSED
  2. minimum increment: amount >= current_bid + increment -> else REJECTED_LOW

Asset existence is checked by the engine before these run.
"""

from datetime import datetime

from src.ap_asset.domain.models import Asset
from src.ap_common.enums import BidOutcome
from src.ap_common.money import minimum_next_bid


def check_auction_open(asset: Asset, now: datetime) -> bool:
    return asset.is_open and now < asset.end_at


def check_minimum_increment(asset: Asset, amount: int, increment: int) -> bool:
    return amount >= minimum_next_bid(asset.current_bid, increment)


def evaluate_bid(
    asset: Asset, amount: int, now: datetime, increment: int
) -> BidOutcome:
    if not check_auction_open(asset, now):
        return BidOutcome.REJECTED_CLOSED
    if not check_minimum_increment(asset, amount, increment):
        return BidOutcome.REJECTED_LOW
    return BidOutcome.ACCEPTED


def is_unusually_high(current_bid: int, amount: int) -> bool:
    """Bids above twice the current bid are accepted but flagged to the bidder."""
    return current_bid > 0 and amount > current_bid * 2
