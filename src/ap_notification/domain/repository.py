# src/ap_notification/domain/repository.py
"""NotificationRepository Protocol — interface contract for persistence layer."""

from typing import Any, Protocol

from src.ap_notification.domain.models import Notification


class NotificationRepositoryProtocol(Protocol):
    async def save(self, notification: Notification, db: Any) -> None: ...

    async def get_by_id(self, notification_id: str, db: Any) -> Notification | None: ...

    async def list_for_recipient(
        self, recipient_id: str, unread_only: bool, limit: int, db: Any
    ) -> list[Notification]:
        """Newest first."""
        ...

    async def count_unread(self, recipient_id: str, db: Any) -> int: ...

    async def mark_read(self, notification_id: str, db: Any) -> None: ...
