"""ap_asset REST endpoints.

POST /assets               — create a listing (sheriff/admin; caller becomes owner)
GET  /assets               — list, soonest-ending first
GET  /assets/{asset_id}    — detail with countdown
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Request

from src.ap_asset.application.schemas import CreateAssetRequest
from src.ap_asset.application.service import AssetApplicationService
from src.ap_common.response import ApiResponse, success_response
from src.ap_gateway.auth.dependencies import CurrentUser, get_current_user, require_lister

router = APIRouter(prefix="/assets", tags=["assets"])

_service = AssetApplicationService()


@router.post("", status_code=201)
async def create_asset(
    req: CreateAssetRequest,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(require_lister)],
) -> ApiResponse:
    result = await _service.create_asset(req, current_user.user_id)
    return success_response(result.model_dump(), getattr(request.state, "request_id", None))


@router.get("")
async def list_assets(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    status: Literal["open", "ended"] | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    result = await _service.list_assets(status, limit)
    return success_response(result.model_dump(), getattr(request.state, "request_id", None))


@router.get("/{asset_id}")
async def get_asset(
    asset_id: str,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ApiResponse:
    result = await _service.get_asset(asset_id)
    return success_response(result.model_dump(), getattr(request.state, "request_id", None))
