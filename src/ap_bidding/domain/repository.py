# src/ap_bidding/domain/repository.py
"""BidLedger Protocol — append-only history of bid attempts.

Entries are never updated or deleted.
"""

from typing import Any, Protocol

from src.ap_bidding.domain.models import Bid


class BidLedgerProtocol(Protocol):
    async def append(self, bid: Bid, db: Any) -> None: ...

    async def highest_accepted(self, asset_id: str, db: Any) -> Bid | None: ...

    async def prior_bidders(self, asset_id: str, db: Any) -> set[str]:
        """Every bidder who has ever had an accepted bid on the asset."""
        ...

    async def list_for_asset(
        self, asset_id: str, accepted_only: bool, limit: int, db: Any
    ) -> list[Bid]:
        """Newest first."""
        ...
