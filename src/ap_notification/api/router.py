"""ap_notification REST endpoints — the caller's own inbox only.

GET  /notifications                      — newest first
GET  /notifications/unread-count
POST /notifications/{notification_id}/read
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.ap_common.response import ApiResponse, success_response
from src.ap_gateway.auth.dependencies import CurrentUser, get_current_user
from src.ap_notification.application.service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])

_service = NotificationService()


@router.get("")
async def list_notifications(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    result = await _service.list_notifications(current_user.user_id, unread_only, limit)
    return success_response(result.model_dump(), getattr(request.state, "request_id", None))


@router.get("/unread-count")
async def unread_count(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ApiResponse:
    result = await _service.unread_count(current_user.user_id)
    return success_response(result.model_dump(), getattr(request.state, "request_id", None))


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ApiResponse:
    result = await _service.mark_read(notification_id, current_user.user_id)
    return success_response(result.model_dump(), getattr(request.state, "request_id", None))
