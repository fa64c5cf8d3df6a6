"""FastAPI dependencies: get_current_user and role guards.

Usage in any protected router:
    from src.ap_gateway.auth.dependencies import CurrentUser, get_current_user

    @router.get("/protected")
    async def protected(user: Annotated[CurrentUser, Depends(get_current_user)]):
        ...
"""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.ap_common.errors import AppError, InvalidCredentialsError
from src.ap_gateway.auth.jwt_handler import decode_token

_bearer = HTTPBearer(auto_error=False)

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)

USER_TYPES = frozenset({"buyer", "sheriff", "admin"})


@dataclass(frozen=True)
class CurrentUser:
    user_id: str
    user_type: str


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> CurrentUser:
    """Validate the Bearer token and return the caller. HTTP 401 on any failure."""
    if credentials is None:
        raise _CREDENTIALS_EXCEPTION
    try:
        payload = decode_token(credentials.credentials)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    user_id = payload.get("sub")
    user_type = payload.get("user_type", "buyer")
    if not user_id or user_type not in USER_TYPES:
        raise _CREDENTIALS_EXCEPTION
    return CurrentUser(user_id=user_id, user_type=user_type)


async def require_buyer(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Only buyers place bids."""
    if current_user.user_type != "buyer":
        raise AppError(1006, "Only buyers can place bids", 403)
    return current_user


async def require_lister(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Sheriffs and admins create listings."""
    if current_user.user_type not in ("sheriff", "admin"):
        raise AppError(1006, "Only sheriffs or admins can create listings", 403)
    return current_user
