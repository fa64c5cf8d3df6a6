"""Global enums — values must match DB CHECK constraints exactly."""

from enum import Enum


class AssetStatus(str, Enum):
    OPEN = "open"
    ENDED = "ended"


class BidOutcome(str, Enum):
    ACCEPTED = "accepted"
    REJECTED_LOW = "rejected_low"
    REJECTED_CLOSED = "rejected_closed"


class NotificationType(str, Enum):
    NEW_BID = "new_bid"
    OUTBID = "outbid"


class AuctionPhase(str, Enum):
    """Countdown phase shown to bidders — derived, never stored."""
    ACTIVE = "active"
    ENDING_SOON = "ending_soon"
    ENDED = "ended"


class BidDisplayStatus(str, Enum):
    """Per-row status in the bid history view — derived, never stored."""
    WINNING = "winning"
    OUTBID = "outbid"
