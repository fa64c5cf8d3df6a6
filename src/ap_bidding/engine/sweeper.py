"""Periodic auction clock: ends expired auctions even when nobody bids.

The engine also expires lazily on the next bid, so a stopped or slow sweeper
delays the status flip but can never let a late bid through.
"""

import asyncio
import logging
from contextlib import suppress

from src.ap_bidding.engine.engine import BidEngine

logger = logging.getLogger(__name__)


class AuctionClockSweeper:
    def __init__(self, engine: BidEngine, interval_seconds: float) -> None:
        self._engine = engine
        self._interval = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="auction-clock-sweeper")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def sweep_once(self) -> list[str]:
        ended = await self._engine.expire_due()
        if ended:
            logger.info("Auction clock ended %d asset(s): %s", len(ended), ", ".join(ended))
        return ended

    async def _run(self) -> None:
        while True:
            try:
                await self.sweep_once()
            except Exception:
                # Keep sweeping; the next tick retries and bids still expire lazily.
                logger.exception("Auction clock sweep failed")
            await asyncio.sleep(self._interval)
