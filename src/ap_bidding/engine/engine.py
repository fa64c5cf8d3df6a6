"""BidEngine — stateful orchestrator for per-asset bid decisions.

Every decision for one asset runs under that asset's asyncio.Lock and inside
one storage transaction (the postgres backend additionally holds the asset
row FOR UPDATE). Within that critical section, in order:

  1. load the asset                -> AssetNotFoundError if missing
  2. fix the decision time         (never earlier than the last accepted bid)
  3. apply the auction clock       (open -> ended if end_at has passed)
  4. evaluate the bid              (closed? too low?)
  5. append exactly one ledger row
  6. on accept only: update the asset bid state

Notification fan-out is NOT done here: callers run it after the lock is
released, using the prior-bidder snapshot carried in BidAccepted.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any

from config.settings import settings
from src.ap_asset.domain.models import Asset
from src.ap_bidding.domain.clock import apply_clock, decision_time
from src.ap_bidding.domain.models import Bid, BidAccepted, BidRejected, BidResult
from src.ap_bidding.domain.rules import evaluate_bid
from src.ap_common.datetime_utils import utc_now
from src.ap_common.enums import AssetStatus, BidOutcome
from src.ap_common.errors import AssetNotFoundError
from src.ap_common.id_generator import generate_id
from src.ap_common.money import minimum_next_bid
from src.ap_storage.backend import Storage

logger = logging.getLogger(__name__)


class BidEngine:
    def __init__(self, storage: Storage, min_increment: int | None = None) -> None:
        self._storage = storage
        self._increment = (
            settings.MIN_BID_INCREMENT if min_increment is None else min_increment
        )
        self._asset_locks: dict[str, asyncio.Lock] = {}

    @property
    def min_increment(self) -> int:
        return self._increment

    def _get_or_create_lock(self, asset_id: str) -> asyncio.Lock:
        if asset_id not in self._asset_locks:
            self._asset_locks[asset_id] = asyncio.Lock()
        return self._asset_locks[asset_id]

    def _drop_lock(self, asset_id: str) -> None:
        # Ended assets only ever record rejections, which need no ordering.
        self._asset_locks.pop(asset_id, None)

    def tracked_lock_count(self) -> int:
        return len(self._asset_locks)

    async def submit_bid(
        self,
        asset_id: str,
        bidder_id: str,
        amount: int,
        now: datetime | None = None,
    ) -> BidResult:
        """Main entry point. Returns BidAccepted or BidRejected; raises only for
        a missing asset or an unreachable backend."""
        lock = self._get_or_create_lock(asset_id)
        try:
            async with lock:
                read_at = now or utc_now()
                async with self._storage.transaction() as db:
                    result = await self._submit_bid_inner(
                        asset_id, bidder_id, amount, read_at, db
                    )
        except AssetNotFoundError:
            self._drop_lock(asset_id)
            raise

        if isinstance(result, BidRejected) and result.reason == BidOutcome.REJECTED_CLOSED:
            self._drop_lock(asset_id)

        if isinstance(result, BidAccepted):
            logger.info(
                "Bid %s accepted: asset=%s bidder=%s amount=%d (previous leader=%s)",
                result.bid.id, asset_id, bidder_id, amount, result.previous_highest_bidder_id,
            )
        else:
            logger.info(
                "Bid %s %s: asset=%s bidder=%s amount=%d minimum=%d",
                result.bid.id, result.reason.value, asset_id, bidder_id, amount,
                result.minimum_amount,
            )
        return result

    async def _submit_bid_inner(
        self, asset_id: str, bidder_id: str, amount: int, now: datetime, db: Any
    ) -> BidResult:
        asset = await self._storage.assets.get_for_update(asset_id, db)
        if asset is None:
            raise AssetNotFoundError(asset_id)

        at = decision_time(asset, now)
        if apply_clock(asset, at):
            await self._storage.assets.mark_ended(asset, db)
            logger.info("Asset %s ended at %s (lazy expiry on bid)", asset_id, at.isoformat())

        outcome = evaluate_bid(asset, amount, at, self._increment)
        bid = Bid(
            id=generate_id("bid_"),
            asset_id=asset_id,
            bidder_id=bidder_id,
            amount=amount,
            outcome=outcome,
            created_at=at,
        )

        if outcome != BidOutcome.ACCEPTED:
            await self._storage.bids.append(bid, db)
            return BidRejected(
                bid=bid,
                current_bid=asset.current_bid,
                minimum_amount=minimum_next_bid(asset.current_bid, self._increment),
            )

        prior = await self._storage.bids.prior_bidders(asset_id, db)
        previous_bid = asset.current_bid
        previous_leader = asset.highest_bidder_id
        _apply_accepted_bid(asset, bid)
        await self._storage.bids.append(bid, db)
        await self._storage.assets.update_bid_state(asset, db)
        return BidAccepted(
            bid=bid,
            asset=asset,
            previous_bid=previous_bid,
            previous_highest_bidder_id=previous_leader,
            prior_bidders=frozenset(prior),
        )

    async def expire_asset(self, asset_id: str, now: datetime | None = None) -> bool:
        """Apply the clock to one asset under its lock. True if it transitioned."""
        lock = self._get_or_create_lock(asset_id)
        async with lock:
            read_at = now or utc_now()
            async with self._storage.transaction() as db:
                asset = await self._storage.assets.get_for_update(asset_id, db)
                if asset is None:
                    self._drop_lock(asset_id)
                    raise AssetNotFoundError(asset_id)
                transitioned = apply_clock(asset, read_at)
                if transitioned:
                    await self._storage.assets.mark_ended(asset, db)

        if asset.status == AssetStatus.ENDED:
            self._drop_lock(asset_id)
        if not transitioned:
            return False
        logger.info("Asset %s ended at %s", asset_id, read_at.isoformat())
        return True

    async def expire_due(self, now: datetime | None = None, limit: int = 100) -> list[str]:
        """End every open asset whose end_at has passed. Returns the ended ids."""
        read_at = now or utc_now()
        async with self._storage.transaction() as db:
            due = await self._storage.assets.list_due_for_expiry(read_at, limit, db)

        ended: list[str] = []
        for asset_id in due:
            if await self.expire_asset(asset_id, read_at):
                ended.append(asset_id)
        return ended


def _apply_accepted_bid(asset: Asset, bid: Bid) -> None:
    asset.current_bid = bid.amount
    asset.highest_bidder_id = bid.bidder_id
    asset.last_bid_at = bid.created_at
