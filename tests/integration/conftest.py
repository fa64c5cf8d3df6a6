"""Integration-test fixtures.

These drive the full FastAPI app through httpx's ASGITransport against the
memory storage backend, so no Docker services are needed. ASGITransport does
not run the lifespan; the storage and bid engine are resolved lazily instead.
"""

from collections.abc import Awaitable, Callable
from datetime import timedelta

import pytest
from httpx import AsyncClient

from src.ap_common.datetime_utils import utc_now


@pytest.fixture
def create_asset(
    client: AsyncClient, auth_headers: Callable[..., dict[str, str]]
) -> Callable[..., Awaitable[dict]]:
    """POST /assets as a sheriff and return the created asset payload."""

    async def _create(
        starting_bid: int = 100000,
        ends_in: timedelta = timedelta(hours=3),
        owner_id: str = "sheriff-d",
        title: str = "Toyota Hilux 2019",
    ) -> dict:
        resp = await client.post(
            "/api/v1/assets",
            json={
                "title": title,
                "category": "vehicles",
                "starting_bid": starting_bid,
                "end_at": (utc_now() + ends_in).isoformat(),
            },
            headers=auth_headers(owner_id, "sheriff"),
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _create
