"""BiddingApplicationService — bid submission + fan-out, quotes, history.

submit_bid is the core contract: engine decision under the per-asset lock,
then (accepted bids only) notification fan-out after the lock is released.
A fan-out failure never changes the bid result.
"""

from datetime import datetime

from config.settings import settings
from src.ap_bidding.application.schemas import (
    BidHistoryItem,
    BidHistoryResponse,
    BidOut,
    BidQuoteResponse,
    PlaceBidResponse,
)
from src.ap_bidding.domain.clock import (
    auction_phase,
    format_countdown,
    is_expired,
    time_remaining,
)
from src.ap_bidding.domain.models import BidAccepted, BidRejected, BidResult
from src.ap_bidding.domain.rules import is_unusually_high
from src.ap_bidding.engine.engine import BidEngine
from src.ap_common.datetime_utils import utc_now
from src.ap_common.enums import AssetStatus, BidDisplayStatus
from src.ap_common.errors import AssetNotFoundError
from src.ap_common.money import minimum_next_bid
from src.ap_notification.application.service import NotificationService
from src.ap_notification.domain.models import Notification
from src.ap_storage.backend import Storage, get_storage

_engine: BidEngine | None = None


def get_bid_engine() -> BidEngine:
    global _engine  # noqa: PLW0603
    if _engine is None:
        _engine = BidEngine(get_storage())
    return _engine


def reset_bid_engine() -> None:
    global _engine  # noqa: PLW0603
    _engine = None


class BiddingApplicationService:
    def __init__(
        self,
        storage: Storage | None = None,
        engine: BidEngine | None = None,
        notifier: NotificationService | None = None,
    ) -> None:
        self._storage = storage
        # An injected storage gets its own engine so reads and bids share one store.
        if engine is None and storage is not None:
            engine = BidEngine(storage)
        self._engine = engine
        self._notifier = notifier or NotificationService(storage)

    @property
    def storage(self) -> Storage:
        return self._storage or get_storage()

    @property
    def engine(self) -> BidEngine:
        return self._engine or get_bid_engine()

    async def submit_bid(
        self,
        asset_id: str,
        bidder_id: str,
        amount: int,
        now: datetime | None = None,
    ) -> tuple[BidResult, list[Notification]]:
        result = await self.engine.submit_bid(asset_id, bidder_id, amount, now)
        if isinstance(result, BidRejected):
            return result, []
        notifications = await self._notifier.on_bid_accepted(
            result.asset,
            result.previous_highest_bidder_id,
            result.bid,
            prior_bidders=result.prior_bidders,
        )
        return result, notifications

    async def place_bid(
        self,
        asset_id: str,
        bidder_id: str,
        amount: int,
        now: datetime | None = None,
    ) -> PlaceBidResponse:
        """API flavour of submit_bid: a rejection is raised as its AppError."""
        result, notifications = await self.submit_bid(asset_id, bidder_id, amount, now)
        if isinstance(result, BidRejected):
            raise result.to_error()
        return _accepted_response(result, len(notifications), self.engine.min_increment)

    async def get_bid_quote(
        self, asset_id: str, now: datetime | None = None
    ) -> BidQuoteResponse:
        storage = self.storage
        async with storage.transaction() as db:
            asset = await storage.assets.get_by_id(asset_id, db)
        if asset is None:
            raise AssetNotFoundError(asset_id)

        read_at = now or utc_now()
        increment = self.engine.min_increment
        status = asset.status
        if status == AssetStatus.OPEN and is_expired(asset, read_at):
            status = AssetStatus.ENDED
        return BidQuoteResponse(
            asset_id=asset.id,
            status=status.value,
            phase=auction_phase(asset, read_at, settings.ENDING_SOON_SECONDS).value,
            time_remaining=format_countdown(time_remaining(asset, read_at)),
            end_at=asset.end_at.isoformat(),
            current_bid=asset.current_bid,
            minimum_bid=minimum_next_bid(asset.current_bid, increment),
            increment=increment,
            quick_bids=[asset.current_bid + step for step in settings.QUICK_BID_STEPS],
            high_bid_warning_above=asset.current_bid * 2,
        )

    async def list_bid_history(self, asset_id: str, limit: int) -> BidHistoryResponse:
        storage = self.storage
        async with storage.transaction() as db:
            asset = await storage.assets.get_by_id(asset_id, db)
            if asset is None:
                raise AssetNotFoundError(asset_id)
            bids = await storage.bids.list_for_asset(asset_id, True, limit, db)
            leader = await storage.bids.highest_accepted(asset_id, db)

        leader_id = leader.id if leader else None
        return BidHistoryResponse(
            asset_id=asset_id,
            items=[
                BidHistoryItem(
                    id=b.id,
                    bidder_id=b.bidder_id,
                    amount=b.amount,
                    created_at=b.created_at.isoformat(),
                    status=(
                        BidDisplayStatus.WINNING if b.id == leader_id
                        else BidDisplayStatus.OUTBID
                    ).value,
                )
                for b in bids
            ],
        )


def _accepted_response(
    result: BidAccepted, notifications_sent: int, increment: int
) -> PlaceBidResponse:
    return PlaceBidResponse(
        bid=BidOut.from_domain(result.bid),
        current_bid=result.asset.current_bid,
        highest_bidder_id=result.bid.bidder_id,
        minimum_next_bid=minimum_next_bid(result.asset.current_bid, increment),
        unusually_high=is_unusually_high(result.previous_bid, result.bid.amount),
        notifications_sent=notifications_sent,
    )
