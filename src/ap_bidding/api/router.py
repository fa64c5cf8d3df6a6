"""ap_bidding REST endpoints (nested under assets).

GET  /assets/{asset_id}/quote   — minimum bid, quick bids, countdown
POST /assets/{asset_id}/bids    — place a bid (buyers only, rate limited)
GET  /assets/{asset_id}/bids    — accepted bid history, newest first

A rejected bid answers with the AuctionClosedError (3003) or BidTooLowError
(4101) envelope; both carry data.minimum_amount for re-submission.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.ap_bidding.application.schemas import PlaceBidRequest
from src.ap_bidding.application.service import BiddingApplicationService
from src.ap_common.response import ApiResponse, success_response
from src.ap_gateway.auth.dependencies import CurrentUser, get_current_user
from src.ap_gateway.middleware.rate_limit import enforce_bid_rate_limit

router = APIRouter(prefix="/assets", tags=["bids"])

_service = BiddingApplicationService()


@router.get("/{asset_id}/quote")
async def get_bid_quote(
    asset_id: str,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ApiResponse:
    result = await _service.get_bid_quote(asset_id)
    return success_response(result.model_dump(), getattr(request.state, "request_id", None))


@router.post("/{asset_id}/bids", status_code=201)
async def place_bid(
    asset_id: str,
    req: PlaceBidRequest,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(enforce_bid_rate_limit)],
) -> ApiResponse:
    result = await _service.place_bid(asset_id, current_user.user_id, req.amount)
    return success_response(result.model_dump(), getattr(request.state, "request_id", None))


@router.get("/{asset_id}/bids")
async def list_bid_history(
    asset_id: str,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    result = await _service.list_bid_history(asset_id, limit)
    return success_response(result.model_dump(), getattr(request.state, "request_id", None))
