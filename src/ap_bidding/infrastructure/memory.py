"""In-memory BidLedger for demo mode and tests. Append-only list per asset."""

from collections import defaultdict
from typing import Any

from src.ap_bidding.domain.models import Bid


class InMemoryBidLedger:
    def __init__(self) -> None:
        self._bids: dict[str, list[Bid]] = defaultdict(list)

    async def append(self, bid: Bid, db: Any = None) -> None:
        self._bids[bid.asset_id].append(bid)

    async def highest_accepted(self, asset_id: str, db: Any = None) -> Bid | None:
        accepted = [b for b in self._bids.get(asset_id, []) if b.accepted]
        if not accepted:
            return None
        return max(accepted, key=lambda b: (b.amount, b.id))

    async def prior_bidders(self, asset_id: str, db: Any = None) -> set[str]:
        return {b.bidder_id for b in self._bids.get(asset_id, []) if b.accepted}

    async def list_for_asset(
        self, asset_id: str, accepted_only: bool, limit: int, db: Any = None
    ) -> list[Bid]:
        bids = [
            b for b in reversed(self._bids.get(asset_id, []))
            if b.accepted or not accepted_only
        ]
        return bids[:limit]

    def all_bids(self, asset_id: str) -> list[Bid]:
        """Insertion-ordered copy, for tests and demo inspection."""
        return list(self._bids.get(asset_id, []))
