"""Test checkout throttling per caller and per app."""
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from bookstore.app import create_app
from conftest import make_settings
from shared.security import AuthenticatedUser

EMPTY_CART = {"items": []}


def bearer(app, user_id: str) -> dict:
    user = AuthenticatedUser(id=user_id, email=f"{user_id}@example.com", username=user_id)
    return {"Authorization": f"Bearer {app.state.auth_gateway.create_access_token(user)}"}


async def checkout_statuses(app, headers: dict, attempts: int) -> list[int]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        return [
            (await client.post("/transactions", json=EMPTY_CART, headers=headers)).status_code
            for _ in range(attempts)
        ]


@pytest_asyncio.fixture
async def limited_app(monkeypatch):
    monkeypatch.setenv("CHECKOUT_RATE_LIMIT", "2/minute")
    app = create_app(make_settings(rate_limit_enabled=True))
    await app.state.db.create_all()
    yield app
    await app.state.db.dispose()


@pytest.mark.asyncio
async def test_checkout_is_limited_per_user(limited_app):
    # Empty carts are rejected with 400 but still count against the limit
    assert await checkout_statuses(limited_app, bearer(limited_app, "alice"), 3) == [400, 400, 429]
    assert await checkout_statuses(limited_app, bearer(limited_app, "bob"), 1) == [400]


@pytest.mark.asyncio
async def test_unlimited_app_leaves_other_apps_limited(limited_app):
    unlimited = create_app(make_settings(rate_limit_enabled=False))
    await unlimited.state.db.create_all()
    try:
        assert await checkout_statuses(unlimited, bearer(unlimited, "alice"), 3) == [400, 400, 400]
        assert await checkout_statuses(limited_app, bearer(limited_app, "alice"), 3) == [400, 400, 429]
    finally:
        await unlimited.state.db.dispose()
