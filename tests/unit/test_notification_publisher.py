"""Unit tests for the notification publishers."""
import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

from redis.exceptions import ConnectionError as RedisConnectionError

from src.ap_common.enums import NotificationType
from src.ap_notification.domain.models import Notification
from src.ap_notification.infrastructure.publisher import (
    InMemoryNotificationPublisher,
    RedisNotificationPublisher,
    channel_for,
    decode_notification,
    encode_notification,
)

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _make_notification(recipient_id: str = "buyer-a") -> Notification:
    return Notification(
        id="ntf-1",
        recipient_id=recipient_id,
        type=NotificationType.OUTBID,
        asset_id="ast-1",
        bid_id="bid-2",
        amount=102000,
        message="You've been outbid on Lot 7. New bid: 102,000 BWP",
        read=False,
        created_at=T0,
    )


class TestWireFormat:
    def test_channel_per_recipient(self) -> None:
        assert channel_for("buyer-a") == "notifications:buyer-a"

    def test_decode_restores_types(self) -> None:
        decoded = decode_notification(encode_notification(_make_notification()))
        assert decoded.type is NotificationType.OUTBID
        assert decoded.created_at == T0
        assert decoded == _make_notification()


class TestInMemoryPublisher:
    async def test_delivers_only_to_recipient(self) -> None:
        hub = InMemoryNotificationPublisher()
        got_a, got_b = [], []
        await hub.subscribe("buyer-a", AsyncMock(side_effect=got_a.append))
        await hub.subscribe("buyer-b", AsyncMock(side_effect=got_b.append))

        await hub.publish(_make_notification("buyer-a"))

        assert len(got_a) == 1
        assert got_b == []

    async def test_cancel_stops_delivery(self) -> None:
        hub = InMemoryNotificationPublisher()
        callback = AsyncMock()
        sub = await hub.subscribe("buyer-a", callback)
        assert hub.subscriber_count("buyer-a") == 1

        await sub.cancel()
        await sub.cancel()
        await hub.publish(_make_notification())

        callback.assert_not_awaited()
        assert hub.subscriber_count("buyer-a") == 0

    async def test_failing_subscriber_does_not_block_others(self) -> None:
        hub = InMemoryNotificationPublisher()
        bad = AsyncMock(side_effect=RuntimeError("boom"))
        good = AsyncMock()
        await hub.subscribe("buyer-a", bad)
        await hub.subscribe("buyer-a", good)

        await hub.publish(_make_notification())

        good.assert_awaited_once()


class TestRedisPublisher:
    async def test_publish_to_recipient_channel(self) -> None:
        redis = MagicMock()
        redis.publish = AsyncMock()
        publisher = RedisNotificationPublisher(AsyncMock(return_value=redis))

        await publisher.publish(_make_notification())

        channel, payload = redis.publish.call_args[0]
        assert channel == "notifications:buyer-a"
        assert decode_notification(payload).id == "ntf-1"

    async def test_subscribe_and_cancel(self) -> None:
        payload = encode_notification(_make_notification())

        async def listen():
            yield {"type": "subscribe", "data": 1}
            yield {"type": "message", "data": payload}
            await asyncio.Event().wait()

        pubsub = MagicMock()
        pubsub.subscribe = AsyncMock()
        pubsub.unsubscribe = AsyncMock()
        pubsub.aclose = AsyncMock()
        pubsub.listen = listen
        redis = MagicMock()
        redis.pubsub.return_value = pubsub
        publisher = RedisNotificationPublisher(AsyncMock(return_value=redis))

        received: list[Notification] = []
        delivered = asyncio.Event()

        async def on_message(n: Notification) -> None:
            received.append(n)
            delivered.set()

        sub = await publisher.subscribe("buyer-a", on_message)
        await asyncio.wait_for(delivered.wait(), timeout=1)
        await sub.cancel()

        pubsub.subscribe.assert_awaited_once_with("notifications:buyer-a")
        pubsub.unsubscribe.assert_awaited_once_with("notifications:buyer-a")
        pubsub.aclose.assert_awaited_once()
        assert [n.id for n in received] == ["ntf-1"]

    async def test_cancel_after_reader_died_still_closes_pubsub(self) -> None:
        async def listen():
            yield {"type": "subscribe", "data": 1}
            raise RedisConnectionError("redis connection lost")

        pubsub = MagicMock()
        pubsub.subscribe = AsyncMock()
        pubsub.unsubscribe = AsyncMock(side_effect=RedisConnectionError("redis connection lost"))
        pubsub.aclose = AsyncMock()
        pubsub.listen = listen
        redis = MagicMock()
        redis.pubsub.return_value = pubsub
        publisher = RedisNotificationPublisher(AsyncMock(return_value=redis))

        sub = await publisher.subscribe("buyer-a", AsyncMock())
        for _ in range(5):
            await asyncio.sleep(0)

        await sub.cancel()

        pubsub.unsubscribe.assert_awaited_once_with("notifications:buyer-a")
        pubsub.aclose.assert_awaited_once()
