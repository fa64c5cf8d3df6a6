"""Integer arithmetic utilities for BWP-denominated bids.

All bid amounts are int whole currency units. No float, no Decimal.
"""

from config.settings import settings


def format_amount(amount: int, currency: str | None = None) -> str:
    """Display string used in notification text: 101000 -> '101,000 BWP'."""
    cur = currency or settings.CURRENCY
    if amount < 0:
        return f"-{-amount:,} {cur}"
    return f"{amount:,} {cur}"


def minimum_next_bid(current_bid: int, increment: int) -> int:
    """Smallest amount the next bid may carry."""
    return current_bid + increment

