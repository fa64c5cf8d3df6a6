"""NotificationRepository — PostgreSQL implementation. Raw text() SQL."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ap_common.enums import NotificationType
from src.ap_notification.domain.models import Notification

_COLUMNS = "id, recipient_id, type, asset_id, bid_id, amount, message, read, created_at"

_INSERT_SQL = text("""
    INSERT INTO notifications
        (id, recipient_id, type, asset_id, bid_id, amount, message, read, created_at)
    VALUES
        (:id, :recipient_id, :type, :asset_id, :bid_id, :amount, :message, :read, :created_at)
""")

_GET_SQL = text(f"SELECT {_COLUMNS} FROM notifications WHERE id = :id")

_LIST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM notifications
    WHERE recipient_id = :recipient_id
      AND (NOT CAST(:unread_only AS BOOLEAN) OR read = FALSE)
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_COUNT_UNREAD_SQL = text("""
    SELECT COUNT(*) FROM notifications
    WHERE recipient_id = :recipient_id AND read = FALSE
""")

_MARK_READ_SQL = text("UPDATE notifications SET read = TRUE WHERE id = :id AND read = FALSE")


def _row_to_notification(row: object) -> Notification:
    return Notification(
        id=row.id,  # type: ignore[attr-defined]
        recipient_id=row.recipient_id,  # type: ignore[attr-defined]
        type=NotificationType(row.type),  # type: ignore[attr-defined]
        asset_id=row.asset_id,  # type: ignore[attr-defined]
        bid_id=row.bid_id,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        message=row.message,  # type: ignore[attr-defined]
        read=row.read,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class NotificationRepository:
    async def save(self, notification: Notification, db: AsyncSession) -> None:
        await db.execute(
            _INSERT_SQL,
            {
                "id": notification.id,
                "recipient_id": notification.recipient_id,
                "type": notification.type.value,
                "asset_id": notification.asset_id,
                "bid_id": notification.bid_id,
                "amount": notification.amount,
                "message": notification.message,
                "read": notification.read,
                "created_at": notification.created_at,
            },
        )

    async def get_by_id(self, notification_id: str, db: AsyncSession) -> Notification | None:
        result = await db.execute(_GET_SQL, {"id": notification_id})
        row = result.fetchone()
        return _row_to_notification(row) if row else None

    async def list_for_recipient(
        self, recipient_id: str, unread_only: bool, limit: int, db: AsyncSession
    ) -> list[Notification]:
        result = await db.execute(
            _LIST_SQL,
            {"recipient_id": recipient_id, "unread_only": unread_only, "limit": limit},
        )
        return [_row_to_notification(row) for row in result.fetchall()]

    async def count_unread(self, recipient_id: str, db: AsyncSession) -> int:
        result = await db.execute(_COUNT_UNREAD_SQL, {"recipient_id": recipient_id})
        return int(result.scalar_one())

    async def mark_read(self, notification_id: str, db: AsyncSession) -> None:
        await db.execute(_MARK_READ_SQL, {"id": notification_id})
