"""PostgreSQL storage backend (+ Redis for notification pub/sub)."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from src.ap_asset.infrastructure.persistence import AssetRepository
from src.ap_bidding.infrastructure.ledger import BidLedger
from src.ap_common.database import dispose_engine, get_engine, get_session_factory
from src.ap_common.errors import PersistenceUnavailableError
from src.ap_common.redis_client import close_redis, get_redis
from src.ap_notification.infrastructure.persistence import NotificationRepository
from src.ap_notification.infrastructure.publisher import RedisNotificationPublisher

# Connection-level failures only; constraint violations etc. propagate unchanged.
_UNAVAILABLE = (OperationalError, InterfaceError, ConnectionError, OSError)


class PostgresStorage:
    def __init__(self) -> None:
        self.assets = AssetRepository()
        self.bids = BidLedger()
        self.notifications = NotificationRepository()
        self.publisher = RedisNotificationPublisher(get_redis)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        try:
            async with get_session_factory()() as session:
                async with session.begin():
                    yield session
        except _UNAVAILABLE as exc:
            raise PersistenceUnavailableError(f"Database unavailable: {exc}") from exc

    async def startup(self) -> None:
        """Verify the DB connection."""
        try:
            async with get_engine().connect() as conn:
                await conn.execute(text("SELECT 1"))
        except _UNAVAILABLE as exc:
            raise PersistenceUnavailableError(f"Database unavailable: {exc}") from exc

    async def close(self) -> None:
        await dispose_engine()
        await close_redis()
