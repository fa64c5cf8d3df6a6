"""Unit tests for NotificationService — best-effort fan-out and the inbox."""
import logging
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock

import pytest

from src.ap_asset.domain.models import Asset
from src.ap_bidding.domain.models import Bid
from src.ap_common.enums import AssetStatus, BidOutcome, NotificationType
from src.ap_common.errors import NotificationNotFoundError
from src.ap_notification.application.service import NotificationService
from src.ap_notification.domain.models import Notification
from src.ap_storage.memory import MemoryStorage

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _make_asset(**kwargs: Any) -> Asset:
    defaults: dict[str, Any] = {
        "id": "ast-1",
        "owner_id": "owner-d",
        "title": "Toyota Hilux 2019",
        "category": None,
        "starting_bid": 100000,
        "current_bid": 103000,
        "highest_bidder_id": "buyer-c",
        "end_at": T0 + timedelta(hours=1),
        "status": AssetStatus.OPEN,
        "last_bid_at": T0,
        "created_at": T0,
        "updated_at": T0,
    }
    defaults.update(kwargs)
    return Asset(**defaults)


def _make_bid(bidder_id: str = "buyer-c", amount: int = 103000, bid_id: str = "bid-3") -> Bid:
    return Bid(
        id=bid_id,
        asset_id="ast-1",
        bidder_id=bidder_id,
        amount=amount,
        outcome=BidOutcome.ACCEPTED,
        created_at=T0,
    )


def _make_notification(**kwargs: Any) -> Notification:
    defaults: dict[str, Any] = {
        "id": "ntf-1",
        "recipient_id": "buyer-a",
        "type": NotificationType.OUTBID,
        "asset_id": "ast-1",
        "bid_id": "bid-1",
        "amount": 102000,
        "message": "You've been outbid on Toyota Hilux 2019. New bid: 102,000 BWP",
        "read": False,
        "created_at": T0,
    }
    defaults.update(kwargs)
    return Notification(**defaults)


@pytest.fixture
def mem() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def service(mem: MemoryStorage) -> NotificationService:
    return NotificationService(mem)


class TestOnBidAccepted:
    async def test_owner_and_prior_bidders_notified(
        self, service: NotificationService, mem: MemoryStorage
    ) -> None:
        delivered = await service.on_bid_accepted(
            _make_asset(), "buyer-b", _make_bid(), prior_bidders={"buyer-a", "buyer-b"}
        )

        assert [(n.recipient_id, n.type) for n in delivered] == [
            ("owner-d", NotificationType.NEW_BID),
            ("buyer-a", NotificationType.OUTBID),
            ("buyer-b", NotificationType.OUTBID),
        ]
        assert all(n.bid_id == "bid-3" and n.amount == 103000 for n in delivered)
        assert all(not n.read for n in delivered)
        assert await mem.notifications.count_unread("buyer-a") == 1

    async def test_reads_ledger_when_snapshot_missing(
        self, service: NotificationService, mem: MemoryStorage
    ) -> None:
        await mem.bids.append(_make_bid("buyer-a", 101000, "bid-1"))
        await mem.bids.append(_make_bid("buyer-c", 103000, "bid-3"))

        delivered = await service.on_bid_accepted(_make_asset(), "buyer-a", _make_bid())

        assert sorted(n.recipient_id for n in delivered) == ["buyer-a", "owner-d"]

    async def test_one_failed_write_does_not_stop_others(
        self, service: NotificationService, mem: MemoryStorage, caplog: pytest.LogCaptureFixture
    ) -> None:
        real_save = mem.notifications.save

        async def flaky_save(notification: Notification, db: Any = None) -> None:
            if notification.recipient_id == "buyer-a":
                raise RuntimeError("connection reset")
            await real_save(notification, db)

        mem.notifications.save = flaky_save  # type: ignore[method-assign]

        with caplog.at_level(logging.WARNING):
            delivered = await service.on_bid_accepted(
                _make_asset(), "buyer-b", _make_bid(), prior_bidders={"buyer-a", "buyer-b"}
            )

        assert sorted(n.recipient_id for n in delivered) == ["buyer-b", "owner-d"]
        assert await mem.notifications.count_unread("buyer-a") == 0
        assert "buyer-a" in caplog.text
        assert "connection reset" in caplog.text

    async def test_publish_failure_keeps_stored_notification(
        self, service: NotificationService, mem: MemoryStorage
    ) -> None:
        mem.publisher.publish = AsyncMock(side_effect=ConnectionError("redis down"))

        delivered = await service.on_bid_accepted(
            _make_asset(), None, _make_bid(), prior_bidders=set()
        )

        assert len(delivered) == 1
        assert await mem.notifications.count_unread("owner-d") == 1

    async def test_subscriber_receives_fan_out(
        self, service: NotificationService
    ) -> None:
        received: list[Notification] = []

        async def on_message(n: Notification) -> None:
            received.append(n)

        sub = await service.subscribe("buyer-a", on_message)
        await service.on_bid_accepted(
            _make_asset(), "buyer-a", _make_bid(), prior_bidders={"buyer-a"}
        )
        await sub.cancel()
        await service.on_bid_accepted(
            _make_asset(), "buyer-a", _make_bid(bid_id="bid-4", amount=104000),
            prior_bidders={"buyer-a"},
        )

        assert [n.bid_id for n in received] == ["bid-3"]
        assert received[0].type == NotificationType.OUTBID


class TestInbox:
    async def test_list_newest_first_with_unread_count(
        self, service: NotificationService, mem: MemoryStorage
    ) -> None:
        await mem.notifications.save(_make_notification(id="ntf-1", created_at=T0))
        await mem.notifications.save(
            _make_notification(id="ntf-2", created_at=T0 + timedelta(minutes=1), read=True)
        )
        await mem.notifications.save(_make_notification(id="ntf-3", recipient_id="other"))

        resp = await service.list_notifications("buyer-a", unread_only=False, limit=50)

        assert [n.id for n in resp.items] == ["ntf-2", "ntf-1"]
        assert resp.unread_count == 1

    async def test_list_unread_only(
        self, service: NotificationService, mem: MemoryStorage
    ) -> None:
        await mem.notifications.save(_make_notification(id="ntf-1"))
        await mem.notifications.save(_make_notification(id="ntf-2", read=True))

        resp = await service.list_notifications("buyer-a", unread_only=True, limit=50)

        assert [n.id for n in resp.items] == ["ntf-1"]

    async def test_unread_count(self, service: NotificationService, mem: MemoryStorage) -> None:
        await mem.notifications.save(_make_notification(id="ntf-1"))
        await mem.notifications.save(_make_notification(id="ntf-2"))
        assert (await service.unread_count("buyer-a")).unread_count == 2
        assert (await service.unread_count("nobody")).unread_count == 0


class TestMarkRead:
    async def test_mark_read(self, service: NotificationService, mem: MemoryStorage) -> None:
        await mem.notifications.save(_make_notification())

        out = await service.mark_read("ntf-1", "buyer-a")

        assert out.read is True
        assert await mem.notifications.count_unread("buyer-a") == 0

    async def test_mark_read_twice_is_noop(
        self, service: NotificationService, mem: MemoryStorage
    ) -> None:
        await mem.notifications.save(_make_notification())
        await service.mark_read("ntf-1", "buyer-a")
        out = await service.mark_read("ntf-1", "buyer-a")
        assert out.read is True

    async def test_missing_notification(self, service: NotificationService) -> None:
        with pytest.raises(NotificationNotFoundError) as exc_info:
            await service.mark_read("ntf-404", "buyer-a")
        assert exc_info.value.code == 5001

    async def test_other_users_notification_is_not_found(
        self, service: NotificationService, mem: MemoryStorage
    ) -> None:
        await mem.notifications.save(_make_notification())

        with pytest.raises(NotificationNotFoundError):
            await service.mark_read("ntf-1", "buyer-b")
        assert await mem.notifications.count_unread("buyer-a") == 1
