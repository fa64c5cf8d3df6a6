"""Storage capability — the one object through which the core reaches persistence.

Selected once from settings.STORAGE_BACKEND ("postgres" or "memory") and
shared process-wide via get_storage(). Callers never check which backend
they have; they only use the repositories and transaction() below.
"""

from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol

from config.settings import settings
from src.ap_asset.domain.repository import AssetRepositoryProtocol
from src.ap_bidding.domain.repository import BidLedgerProtocol
from src.ap_notification.domain.publisher import NotificationPublisherProtocol
from src.ap_notification.domain.repository import NotificationRepositoryProtocol


class Storage(Protocol):
    assets: AssetRepositoryProtocol
    bids: BidLedgerProtocol
    notifications: NotificationRepositoryProtocol
    publisher: NotificationPublisherProtocol

    def transaction(self) -> AbstractAsyncContextManager[Any]:
        """All-or-nothing unit of work. Yields the `db` handle repositories expect.

        Raises PersistenceUnavailableError if the backend cannot be reached;
        in that case nothing written inside the block survives.
        """
        ...

    async def startup(self) -> None: ...

    async def close(self) -> None: ...


_storage: Storage | None = None


def build_storage(backend: str) -> Storage:
    if backend == "memory":
        from src.ap_storage.memory import MemoryStorage

        return MemoryStorage()
    if backend == "postgres":
        from src.ap_storage.postgres import PostgresStorage

        return PostgresStorage()
    raise ValueError(f"Unknown storage backend: {backend}")


def get_storage() -> Storage:
    global _storage  # noqa: PLW0603
    if _storage is None:
        _storage = build_storage(settings.STORAGE_BACKEND)
    return _storage


def set_storage(storage: Storage | None) -> None:
    """Install an explicit storage (tests), or None to rebuild from settings."""
    global _storage  # noqa: PLW0603
    _storage = storage
