"""JWT bearer-token verification.

Tokens are minted by the external auth provider (login, registration and
password handling live there); this service only verifies them. Claims used:

    sub        — user id (opaque; becomes bidder_id / owner_id / recipient_id)
    user_type  — "buyer" | "sheriff" | "admin"
    type       — must be "access"
    exp        — expiry, enforced by python-jose

create_access_token exists for local tooling and tests.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.ap_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"


def create_access_token(
    user_id: str, user_type: str = "buyer", expires_in: timedelta = timedelta(minutes=30)
) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "user_type": user_type,
        "type": "access",
        "iat": now,
        "exp": now + expires_in,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_token(token: str) -> dict[str, str]:
    """Decode and validate an access token.

    Raises:
        InvalidCredentialsError: signature, expiry or token type is wrong.
    """
    try:
        payload: dict[str, str] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type") != "access":
        raise InvalidCredentialsError()
    return payload
