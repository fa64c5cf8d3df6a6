"""Domain models for ap_notification — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime

from src.ap_common.enums import NotificationType


@dataclass
class Notification:
    """One message to one recipient. Only `read` ever changes after creation."""

    id: str
    recipient_id: str
    type: NotificationType
    asset_id: str
    bid_id: str
    amount: int
    message: str
    read: bool
    created_at: datetime


@dataclass(frozen=True)
class FanOutTarget:
    recipient_id: str
    type: NotificationType
