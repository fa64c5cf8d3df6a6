"""In-memory NotificationRepository for demo mode and tests."""

from dataclasses import replace
from typing import Any

from src.ap_notification.domain.models import Notification


class InMemoryNotificationRepository:
    def __init__(self) -> None:
        self._items: dict[str, Notification] = {}

    async def save(self, notification: Notification, db: Any = None) -> None:
        self._items[notification.id] = replace(notification)

    async def get_by_id(self, notification_id: str, db: Any = None) -> Notification | None:
        n = self._items.get(notification_id)
        return replace(n) if n else None

    async def list_for_recipient(
        self, recipient_id: str, unread_only: bool, limit: int, db: Any = None
    ) -> list[Notification]:
        items = [
            n for n in self._items.values()
            if n.recipient_id == recipient_id and (not unread_only or not n.read)
        ]
        items.sort(key=lambda n: (n.created_at, n.id), reverse=True)
        return [replace(n) for n in items[:limit]]

    async def count_unread(self, recipient_id: str, db: Any = None) -> int:
        return sum(
            1 for n in self._items.values() if n.recipient_id == recipient_id and not n.read
        )

    async def mark_read(self, notification_id: str, db: Any = None) -> None:
        n = self._items.get(notification_id)
        if n is not None:
            n.read = True
