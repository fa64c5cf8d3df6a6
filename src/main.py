"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.ap_asset.api.router import router as asset_router
from src.ap_bidding.api.router import router as bid_router
from src.ap_bidding.application.service import get_bid_engine
from src.ap_bidding.engine.sweeper import AuctionClockSweeper
from src.ap_common.errors import AppError
from src.ap_common.response import error_response
from src.ap_gateway.middleware.request_log import RequestLogMiddleware
from src.ap_notification.api.router import router as notification_router
from src.ap_storage.backend import get_storage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify storage, start the auction clock. Shutdown: stop + dispose."""
    storage = get_storage()
    await storage.startup()
    sweeper = AuctionClockSweeper(get_bid_engine(), settings.AUCTION_SWEEP_INTERVAL_SECONDS)
    sweeper.start()
    logger.info("%s started (storage=%s)", settings.APP_NAME, settings.STORAGE_BACKEND)
    yield
    await sweeper.stop()
    await storage.close()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, exc.details)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(asset_router, prefix="/api/v1")
app.include_router(bid_router, prefix="/api/v1")
app.include_router(notification_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0", "storage": settings.STORAGE_BACKEND}
