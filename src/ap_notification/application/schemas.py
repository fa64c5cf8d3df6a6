"""Pydantic schemas for ap_notification API responses."""

from pydantic import BaseModel

from src.ap_notification.domain.models import Notification


class NotificationOut(BaseModel):
    id: str
    recipient_id: str
    type: str
    asset_id: str
    bid_id: str
    amount: int
    message: str
    read: bool
    created_at: str

    @classmethod
    def from_domain(cls, n: Notification) -> "NotificationOut":
        return cls(
            id=n.id,
            recipient_id=n.recipient_id,
            type=n.type.value,
            asset_id=n.asset_id,
            bid_id=n.bid_id,
            amount=n.amount,
            message=n.message,
            read=n.read,
            created_at=n.created_at.isoformat(),
        )


class NotificationListResponse(BaseModel):
    items: list[NotificationOut]
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int
