"""NotificationService — fan-out delivery and the recipient inbox.

Fan-out is best-effort: each notification is written in its own transaction,
so one failed write neither blocks the others nor touches the bid that
triggered it. Failures are logged as NotificationDeliveryFailure and dropped.
"""

import logging
from collections.abc import Iterable

from src.ap_asset.domain.models import Asset
from src.ap_bidding.domain.models import Bid
from src.ap_common.datetime_utils import utc_now
from src.ap_common.errors import NotificationDeliveryFailure, NotificationNotFoundError
from src.ap_common.id_generator import generate_id
from src.ap_notification.application.schemas import (
    NotificationListResponse,
    NotificationOut,
    UnreadCountResponse,
)
from src.ap_notification.domain.fanout import plan_fan_out, render_message
from src.ap_notification.domain.models import Notification
from src.ap_notification.domain.publisher import NotificationCallback, Subscription
from src.ap_storage.backend import Storage, get_storage

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, storage: Storage | None = None) -> None:
        self._storage = storage

    @property
    def storage(self) -> Storage:
        return self._storage or get_storage()

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------

    async def on_bid_accepted(
        self,
        asset: Asset,
        previous_highest_bidder_id: str | None,
        new_bid: Bid,
        prior_bidders: Iterable[str] | None = None,
    ) -> list[Notification]:
        """Notify the owner (new_bid) and earlier bidders (outbid).

        prior_bidders is the ledger snapshot taken with the bid; when omitted
        the ledger is read now. Returns the notifications actually stored.
        """
        storage = self.storage
        if prior_bidders is None:
            async with storage.transaction() as db:
                prior_bidders = await storage.bids.prior_bidders(asset.id, db)

        targets = plan_fan_out(
            owner_id=asset.owner_id,
            bidder_id=new_bid.bidder_id,
            previous_highest_bidder_id=previous_highest_bidder_id,
            prior_bidders=prior_bidders,
        )

        delivered: list[Notification] = []
        for target in targets:
            notification = Notification(
                id=generate_id("ntf_"),
                recipient_id=target.recipient_id,
                type=target.type,
                asset_id=asset.id,
                bid_id=new_bid.id,
                amount=new_bid.amount,
                message=render_message(target.type, new_bid.amount, asset.title),
                read=False,
                created_at=utc_now(),
            )
            try:
                async with storage.transaction() as db:
                    await storage.notifications.save(notification, db)
            except Exception as exc:
                failure = NotificationDeliveryFailure(target.recipient_id, new_bid.id, str(exc))
                logger.warning("%s", failure.message, exc_info=True)
                continue

            delivered.append(notification)
            try:
                await storage.publisher.publish(notification)
            except Exception:
                logger.warning(
                    "Realtime publish of %s to %s failed",
                    notification.id, notification.recipient_id, exc_info=True,
                )

        logger.info(
            "Fan-out for bid %s: %d/%d notification(s) stored",
            new_bid.id, len(delivered), len(targets),
        )
        return delivered

    # ------------------------------------------------------------------
    # Inbox
    # ------------------------------------------------------------------

    async def list_notifications(
        self, recipient_id: str, unread_only: bool, limit: int
    ) -> NotificationListResponse:
        storage = self.storage
        async with storage.transaction() as db:
            items = await storage.notifications.list_for_recipient(
                recipient_id, unread_only, limit, db
            )
            unread = await storage.notifications.count_unread(recipient_id, db)
        return NotificationListResponse(
            items=[NotificationOut.from_domain(n) for n in items],
            unread_count=unread,
        )

    async def unread_count(self, recipient_id: str) -> UnreadCountResponse:
        storage = self.storage
        async with storage.transaction() as db:
            count = await storage.notifications.count_unread(recipient_id, db)
        return UnreadCountResponse(unread_count=count)

    async def mark_read(self, notification_id: str, recipient_id: str) -> NotificationOut:
        """Only the recipient may mark; marking an already-read one is a no-op."""
        storage = self.storage
        async with storage.transaction() as db:
            notification = await storage.notifications.get_by_id(notification_id, db)
            # Someone else's notification looks exactly like a missing one.
            if notification is None or notification.recipient_id != recipient_id:
                raise NotificationNotFoundError(notification_id)
            if not notification.read:
                await storage.notifications.mark_read(notification_id, db)
                notification.read = True
        return NotificationOut.from_domain(notification)

    async def subscribe(
        self, recipient_id: str, callback: NotificationCallback
    ) -> Subscription:
        return await self.storage.publisher.subscribe(recipient_id, callback)
