"""Domain models for ap_bidding.

Bid is one immutable ledger entry per attempt. BidAccepted / BidRejected
are the typed results of BidEngine.submit_bid — a rejection is an expected
outcome, not an exception.
"""

from dataclasses import dataclass, field
from datetime import datetime

from src.ap_asset.domain.models import Asset
from src.ap_common.enums import BidOutcome
from src.ap_common.errors import AppError, AuctionClosedError, BidTooLowError


@dataclass(frozen=True)
class Bid:
    id: str
    asset_id: str
    bidder_id: str
    amount: int
    outcome: BidOutcome
    created_at: datetime

    @property
    def accepted(self) -> bool:
        return self.outcome == BidOutcome.ACCEPTED


@dataclass(frozen=True)
class BidAccepted:
    bid: Bid
    asset: Asset                          # state after the update
    previous_bid: int                     # asset.current_bid before the update
    previous_highest_bidder_id: str | None
    # Ledger snapshot taken inside the bid transaction, before this bid.
    prior_bidders: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class BidRejected:
    bid: Bid
    current_bid: int
    minimum_amount: int

    @property
    def reason(self) -> BidOutcome:
        return self.bid.outcome

    def to_error(self) -> AppError:
        if self.reason == BidOutcome.REJECTED_CLOSED:
            return AuctionClosedError(self.bid.asset_id, self.current_bid, self.minimum_amount)
        return BidTooLowError(self.bid.amount, self.current_bid, self.minimum_amount)


BidResult = BidAccepted | BidRejected
