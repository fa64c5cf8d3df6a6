"""Pydantic schemas for ap_bidding API requests/responses."""

from pydantic import BaseModel, Field

from src.ap_bidding.domain.models import Bid


class PlaceBidRequest(BaseModel):
    amount: int = Field(gt=0, description="Whole BWP")


class BidOut(BaseModel):
    id: str
    asset_id: str
    bidder_id: str
    amount: int
    outcome: str
    created_at: str

    @classmethod
    def from_domain(cls, b: Bid) -> "BidOut":
        return cls(
            id=b.id,
            asset_id=b.asset_id,
            bidder_id=b.bidder_id,
            amount=b.amount,
            outcome=b.outcome.value,
            created_at=b.created_at.isoformat(),
        )


class PlaceBidResponse(BaseModel):
    bid: BidOut
    current_bid: int
    highest_bidder_id: str
    minimum_next_bid: int
    # Bids above twice the previous current bid are accepted but flagged.
    unusually_high: bool
    notifications_sent: int


class BidQuoteResponse(BaseModel):
    asset_id: str
    status: str
    phase: str
    time_remaining: str
    end_at: str
    current_bid: int
    minimum_bid: int
    increment: int
    quick_bids: list[int]
    high_bid_warning_above: int


class BidHistoryItem(BaseModel):
    id: str
    bidder_id: str
    amount: int
    created_at: str
    status: str  # "winning" | "outbid"


class BidHistoryResponse(BaseModel):
    asset_id: str
    items: list[BidHistoryItem]
