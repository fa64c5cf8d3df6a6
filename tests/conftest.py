"""Shared test fixtures.

The whole suite runs against the memory storage backend; settings are read
at import time, so the environment is prepared before anything from src/ or
config/ is imported.
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-production")
os.environ["STORAGE_BACKEND"] = "memory"

from collections.abc import Callable  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.ap_bidding.application.service import reset_bid_engine  # noqa: E402
from src.ap_gateway.auth.jwt_handler import create_access_token  # noqa: E402
from src.ap_gateway.middleware.rate_limit import set_rate_limiter  # noqa: E402
from src.ap_storage.backend import set_storage  # noqa: E402
from src.ap_storage.memory import MemoryStorage  # noqa: E402
from src.main import app  # noqa: E402


@pytest.fixture
def storage() -> MemoryStorage:
    """Fresh memory storage installed as the process-wide backend."""
    mem = MemoryStorage()
    set_storage(mem)
    reset_bid_engine()
    set_rate_limiter(None)
    yield mem
    set_storage(None)
    reset_bid_engine()
    set_rate_limiter(None)


@pytest.fixture
async def client(storage: MemoryStorage) -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers() -> Callable[[str, str], dict[str, str]]:
    """Build a Bearer header for any user id / role."""

    def _headers(user_id: str, user_type: str = "buyer") -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id, user_type)}"}

    return _headers
