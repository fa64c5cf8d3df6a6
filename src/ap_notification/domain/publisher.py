"""Realtime notification channel contract.

subscribe() returns a handle whose cancel() stops delivery. Publishing is
fire-and-forget relative to the bid.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from src.ap_notification.domain.models import Notification

NotificationCallback = Callable[[Notification], Awaitable[None]]


class Subscription(Protocol):
    recipient_id: str

    async def cancel(self) -> None: ...


class NotificationPublisherProtocol(Protocol):
    async def publish(self, notification: Notification) -> None: ...

    async def subscribe(
        self, recipient_id: str, callback: NotificationCallback
    ) -> Subscription: ...
