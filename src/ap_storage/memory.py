"""Memory storage backend — demo mode and tests.

Every write path in the engine validates first and mutates last, and
in-memory writes cannot fail, so transaction() needs no undo log.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from src.ap_asset.infrastructure.memory import InMemoryAssetRepository
from src.ap_bidding.infrastructure.memory import InMemoryBidLedger
from src.ap_notification.infrastructure.memory import InMemoryNotificationRepository
from src.ap_notification.infrastructure.publisher import InMemoryNotificationPublisher


class MemoryStorage:
    def __init__(self) -> None:
        self.assets = InMemoryAssetRepository()
        self.bids = InMemoryBidLedger()
        self.notifications = InMemoryNotificationRepository()
        self.publisher = InMemoryNotificationPublisher()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        yield None

    async def startup(self) -> None:
        return None

    async def close(self) -> None:
        return None
