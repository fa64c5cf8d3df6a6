"""Unit tests for BiddingApplicationService — bid + fan-out, quote, history."""
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock

import pytest

from src.ap_asset.domain.models import Asset
from src.ap_bidding.application.service import (
    BiddingApplicationService,
    get_bid_engine,
    reset_bid_engine,
)
from src.ap_bidding.domain.models import BidAccepted, BidRejected
from src.ap_bidding.engine.engine import BidEngine
from src.ap_common.enums import AssetStatus, BidOutcome, NotificationType
from src.ap_common.errors import AssetNotFoundError, AuctionClosedError, BidTooLowError
from src.ap_notification.application.service import NotificationService
from src.ap_storage.backend import set_storage
from src.ap_storage.memory import MemoryStorage

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _make_asset(**kwargs: Any) -> Asset:
    defaults: dict[str, Any] = {
        "id": "ast-1",
        "owner_id": "owner-d",
        "title": "Toyota Hilux 2019",
        "category": "vehicles",
        "starting_bid": 100000,
        "current_bid": 100000,
        "highest_bidder_id": None,
        "end_at": T0 + timedelta(hours=1),
        "status": AssetStatus.OPEN,
        "last_bid_at": None,
        "created_at": T0 - timedelta(days=1),
        "updated_at": T0 - timedelta(days=1),
    }
    defaults.update(kwargs)
    return Asset(**defaults)


@pytest.fixture
async def mem() -> MemoryStorage:
    storage = MemoryStorage()
    await storage.assets.create(_make_asset())
    return storage


@pytest.fixture
def service(mem: MemoryStorage) -> BiddingApplicationService:
    return BiddingApplicationService(storage=mem, engine=BidEngine(mem, min_increment=1000))


async def _inbox(mem: MemoryStorage, recipient_id: str) -> list[tuple[NotificationType, int]]:
    items = await mem.notifications.list_for_recipient(recipient_id, False, 100)
    return sorted((n.type, n.amount) for n in items)


class TestSubmitBidScenarios:
    async def test_accept_low_closed_sequence(
        self, service: BiddingApplicationService, mem: MemoryStorage
    ) -> None:
        r1, _ = await service.submit_bid("ast-1", "buyer-a", 101000, now=T0)
        assert isinstance(r1, BidAccepted)

        r2, n2 = await service.submit_bid("ast-1", "buyer-b", 100500, now=T0)
        assert isinstance(r2, BidRejected)
        assert r2.reason == BidOutcome.REJECTED_LOW
        assert n2 == []

        r3, n3 = await service.submit_bid(
            "ast-1", "buyer-b", 150000, now=T0 + timedelta(hours=1)
        )
        assert isinstance(r3, BidRejected)
        assert r3.reason == BidOutcome.REJECTED_CLOSED
        assert n3 == []

        asset = await mem.assets.get_by_id("ast-1")
        assert asset.current_bid == 101000
        assert asset.status == AssetStatus.ENDED

    async def test_three_bidders_fan_out(
        self, service: BiddingApplicationService, mem: MemoryStorage
    ) -> None:
        _, n1 = await service.submit_bid("ast-1", "buyer-a", 101000, now=T0)
        assert [(n.recipient_id, n.type) for n in n1] == [
            ("owner-d", NotificationType.NEW_BID)
        ]

        _, n2 = await service.submit_bid("ast-1", "buyer-b", 102000, now=T0)
        assert sorted((n.recipient_id, n.type) for n in n2) == [
            ("buyer-a", NotificationType.OUTBID),
            ("owner-d", NotificationType.NEW_BID),
        ]

        r3, n3 = await service.submit_bid("ast-1", "buyer-c", 103000, now=T0)
        assert {n.bid_id for n in n3} == {r3.bid.id}
        assert sorted((n.recipient_id, n.type) for n in n3) == [
            ("buyer-a", NotificationType.OUTBID),
            ("buyer-b", NotificationType.OUTBID),
            ("owner-d", NotificationType.NEW_BID),
        ]

        assert await _inbox(mem, "owner-d") == [
            (NotificationType.NEW_BID, 101000),
            (NotificationType.NEW_BID, 102000),
            (NotificationType.NEW_BID, 103000),
        ]
        assert await _inbox(mem, "buyer-a") == [
            (NotificationType.OUTBID, 102000),
            (NotificationType.OUTBID, 103000),
        ]
        assert await _inbox(mem, "buyer-b") == [(NotificationType.OUTBID, 103000)]
        assert await _inbox(mem, "buyer-c") == []

    async def test_fan_out_failure_does_not_change_bid_result(
        self, service: BiddingApplicationService, mem: MemoryStorage
    ) -> None:
        mem.notifications.save = AsyncMock(side_effect=RuntimeError("disk full"))

        result, notifications = await service.submit_bid("ast-1", "buyer-a", 101000, now=T0)

        assert isinstance(result, BidAccepted)
        assert notifications == []
        asset = await mem.assets.get_by_id("ast-1")
        assert asset.current_bid == 101000


class TestPlaceBid:
    async def test_accepted_response(self, service: BiddingApplicationService) -> None:
        resp = await service.place_bid("ast-1", "buyer-a", 101000, now=T0)
        assert resp.current_bid == 101000
        assert resp.highest_bidder_id == "buyer-a"
        assert resp.minimum_next_bid == 102000
        assert resp.unusually_high is False
        assert resp.notifications_sent == 1
        assert resp.bid.outcome == "accepted"

    async def test_unusually_high_flag(self, service: BiddingApplicationService) -> None:
        resp = await service.place_bid("ast-1", "buyer-a", 250000, now=T0)
        assert resp.unusually_high is True

    async def test_low_bid_raises_bid_too_low(self, service: BiddingApplicationService) -> None:
        with pytest.raises(BidTooLowError) as exc_info:
            await service.place_bid("ast-1", "buyer-a", 100999, now=T0)
        err = exc_info.value
        assert err.code == 4101
        assert err.http_status == 422
        assert err.details == {
            "reason": "rejected_low",
            "current_bid": 100000,
            "minimum_amount": 101000,
        }

    async def test_closed_raises_auction_closed(
        self, service: BiddingApplicationService
    ) -> None:
        with pytest.raises(AuctionClosedError) as exc_info:
            await service.place_bid("ast-1", "buyer-a", 101000, now=T0 + timedelta(hours=2))
        assert exc_info.value.code == 3003
        assert exc_info.value.details["reason"] == "rejected_closed"


class TestBidQuote:
    async def test_quote_for_open_asset(self, service: BiddingApplicationService) -> None:
        quote = await service.get_bid_quote("ast-1", now=T0)
        assert quote.status == "open"
        assert quote.phase == "ending_soon"
        assert quote.time_remaining == "01:00:00"
        assert quote.minimum_bid == 101000
        assert quote.increment == 1000
        assert quote.quick_bids == [101000, 105000, 110000]
        assert quote.high_bid_warning_above == 200000

    async def test_quote_reports_expired_asset_as_ended(
        self, service: BiddingApplicationService
    ) -> None:
        quote = await service.get_bid_quote("ast-1", now=T0 + timedelta(hours=3))
        assert quote.status == "ended"
        assert quote.phase == "ended"
        assert quote.time_remaining == "00:00:00"

    async def test_quote_unknown_asset(self, service: BiddingApplicationService) -> None:
        with pytest.raises(AssetNotFoundError):
            await service.get_bid_quote("missing", now=T0)


class TestBidHistory:
    async def test_history_newest_first_with_winning_marker(
        self, service: BiddingApplicationService
    ) -> None:
        await service.submit_bid("ast-1", "buyer-a", 101000, now=T0)
        await service.submit_bid("ast-1", "buyer-b", 100000, now=T0)  # rejected, hidden
        await service.submit_bid("ast-1", "buyer-b", 103000, now=T0)

        history = await service.list_bid_history("ast-1", limit=50)

        assert [(i.bidder_id, i.amount, i.status) for i in history.items] == [
            ("buyer-b", 103000, "winning"),
            ("buyer-a", 101000, "outbid"),
        ]

    async def test_history_limit(self, service: BiddingApplicationService) -> None:
        for i in range(5):
            await service.submit_bid("ast-1", f"buyer-{i}", 101000 + i * 1000, now=T0)
        history = await service.list_bid_history("ast-1", limit=2)
        assert len(history.items) == 2
        assert history.items[0].amount == 105000

    async def test_history_unknown_asset(self, service: BiddingApplicationService) -> None:
        with pytest.raises(AssetNotFoundError):
            await service.list_bid_history("missing", limit=10)


class TestNotifierWiring:
    async def test_notifier_called_with_engine_snapshot(self, mem: MemoryStorage) -> None:
        notifier = NotificationService(mem)
        notifier.on_bid_accepted = AsyncMock(return_value=[])
        service = BiddingApplicationService(
            storage=mem, engine=BidEngine(mem, min_increment=1000), notifier=notifier
        )
        await service.submit_bid("ast-1", "buyer-a", 101000, now=T0)
        await service.submit_bid("ast-1", "buyer-b", 102000, now=T0)

        args, kwargs = notifier.on_bid_accepted.call_args
        asset, previous_leader, bid = args
        assert asset.current_bid == 102000
        assert previous_leader == "buyer-a"
        assert bid.bidder_id == "buyer-b"
        assert kwargs["prior_bidders"] == frozenset({"buyer-a"})

    async def test_notifier_not_called_on_rejection(self, mem: MemoryStorage) -> None:
        notifier = NotificationService(mem)
        notifier.on_bid_accepted = AsyncMock(return_value=[])
        service = BiddingApplicationService(
            storage=mem, engine=BidEngine(mem, min_increment=1000), notifier=notifier
        )
        await service.submit_bid("ast-1", "buyer-a", 1, now=T0)
        notifier.on_bid_accepted.assert_not_called()


class TestStorageInjection:
    async def test_injected_storage_is_used_for_bids_and_reads(self, mem: MemoryStorage) -> None:
        set_storage(MemoryStorage())
        reset_bid_engine()
        try:
            service = BiddingApplicationService(storage=mem)
            quote = await service.get_bid_quote("ast-1", now=T0)
            result, _ = await service.submit_bid("ast-1", "buyer-a", quote.minimum_bid, now=T0)
        finally:
            set_storage(None)
            reset_bid_engine()

        assert isinstance(result, BidAccepted)
        assert (await mem.assets.get_by_id("ast-1")).current_bid == quote.minimum_bid
        assert [b.bidder_id for b in mem.bids.all_bids("ast-1")] == ["buyer-a"]

    def test_without_storage_falls_back_to_shared_engine(self, mem: MemoryStorage) -> None:
        set_storage(mem)
        reset_bid_engine()
        try:
            assert BiddingApplicationService().engine is get_bid_engine()
        finally:
            set_storage(None)
            reset_bid_engine()
