"""Notification publishers: Redis pub/sub (postgres backend) and in-process (memory backend).

Channel per recipient: "notifications:{recipient_id}". Payload is the JSON
encoding produced by encode_notification().
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime

import redis.asyncio as aioredis
from redis.asyncio.client import PubSub
from redis.exceptions import RedisError

from src.ap_common.enums import NotificationType
from src.ap_notification.domain.models import Notification
from src.ap_notification.domain.publisher import NotificationCallback

logger = logging.getLogger(__name__)


def channel_for(recipient_id: str) -> str:
    return f"notifications:{recipient_id}"


def encode_notification(n: Notification) -> str:
    return json.dumps(
        {
            "id": n.id,
            "recipient_id": n.recipient_id,
            "type": n.type.value,
            "asset_id": n.asset_id,
            "bid_id": n.bid_id,
            "amount": n.amount,
            "message": n.message,
            "read": n.read,
            "created_at": n.created_at.isoformat(),
        }
    )


def decode_notification(raw: str) -> Notification:
    data = json.loads(raw)
    return Notification(
        id=data["id"],
        recipient_id=data["recipient_id"],
        type=NotificationType(data["type"]),
        asset_id=data["asset_id"],
        bid_id=data["bid_id"],
        amount=data["amount"],
        message=data["message"],
        read=data["read"],
        created_at=datetime.fromisoformat(data["created_at"]),
    )


# ---------------------------------------------------------------------------
# Redis
# ---------------------------------------------------------------------------


class RedisSubscription:
    def __init__(
        self, recipient_id: str, pubsub: PubSub, task: asyncio.Task[None]
    ) -> None:
        self.recipient_id = recipient_id
        self._pubsub = pubsub
        self._task = task

    async def cancel(self) -> None:
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.warning(
                "Notification reader for %s had already failed", self.recipient_id,
                exc_info=True,
            )
        finally:
            try:
                await self._pubsub.unsubscribe(channel_for(self.recipient_id))
            except (RedisError, OSError):
                logger.warning("Unsubscribe failed for %s", self.recipient_id, exc_info=True)
            finally:
                await self._pubsub.aclose()


class RedisNotificationPublisher:
    def __init__(self, redis_factory: Callable[[], Awaitable[aioredis.Redis]]) -> None:
        self._redis_factory = redis_factory

    async def publish(self, notification: Notification) -> None:
        redis = await self._redis_factory()
        await redis.publish(
            channel_for(notification.recipient_id), encode_notification(notification)
        )

    async def subscribe(
        self, recipient_id: str, callback: NotificationCallback
    ) -> RedisSubscription:
        redis = await self._redis_factory()
        pubsub = redis.pubsub()
        await pubsub.subscribe(channel_for(recipient_id))

        async def _reader() -> None:
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                try:
                    await callback(decode_notification(message["data"]))
                except Exception:
                    logger.exception("Notification subscriber for %s failed", recipient_id)

        task = asyncio.create_task(_reader(), name=f"notif-sub-{recipient_id}")
        return RedisSubscription(recipient_id, pubsub, task)


# ---------------------------------------------------------------------------
# In-process
# ---------------------------------------------------------------------------


class InMemorySubscription:
    def __init__(self, hub: "InMemoryNotificationPublisher", recipient_id: str,
                 callback: NotificationCallback) -> None:
        self.recipient_id = recipient_id
        self.callback = callback
        self._hub = hub

    async def cancel(self) -> None:
        self._hub._remove(self)


class InMemoryNotificationPublisher:
    def __init__(self) -> None:
        self._subs: dict[str, list[InMemorySubscription]] = {}

    async def publish(self, notification: Notification) -> None:
        for sub in list(self._subs.get(notification.recipient_id, [])):
            try:
                await sub.callback(notification)
            except Exception:
                logger.exception(
                    "Notification subscriber for %s failed", notification.recipient_id
                )

    async def subscribe(
        self, recipient_id: str, callback: NotificationCallback
    ) -> InMemorySubscription:
        sub = InMemorySubscription(self, recipient_id, callback)
        self._subs.setdefault(recipient_id, []).append(sub)
        return sub

    def subscriber_count(self, recipient_id: str) -> int:
        return len(self._subs.get(recipient_id, []))

    def _remove(self, sub: InMemorySubscription) -> None:
        subs = self._subs.get(sub.recipient_id, [])
        if sub in subs:
            subs.remove(sub)
