"""Integration-test fixtures.

Pre-condition: PostgreSQL + Redis running and ``alembic upgrade head`` applied.

All integration tests share a single event loop so that the module-level
SQLAlchemy async engine pool and Redis pool remain valid across the whole
session. The app lifespan is entered explicitly (ASGITransport does not run
it) so the hub, settlement queue and worker exist.

Helpers are exposed as factory fixtures: ``await register()``,
``await fund(headers, "500.00")``, ``await new_tournament(max_slots=1)``.
"""

import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from src.main import app
from src.tw_common.database import async_session_factory

Headers = dict[str, str]


def _unique_user() -> dict[str, str]:
    uid = uuid.uuid4().hex[:8]
    return {
        "username": f"tw_{uid}",
        "password": "TestPass1",
        "phone": f"017{int(uid, 16) % 10**8:08d}",
    }


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncGenerator[AsyncClient, None]:
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def new_user() -> Callable[[], dict[str, str]]:
    return _unique_user


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def register(client: AsyncClient) -> Callable[[], Awaitable[tuple[int, Headers]]]:
    """Register + log in a fresh user; returns (user_id, auth headers)."""

    async def _register() -> tuple[int, Headers]:
        user = _unique_user()
        reg = await client.post("/api/v1/auth/register", json=user)
        assert reg.status_code == 201, reg.text
        resp = await client.post(
            "/api/v1/auth/login",
            json={"username": user["username"], "password": user["password"]},
        )
        data = resp.json()["data"]
        return data["user"]["user_id"], {"Authorization": f"Bearer {data['access_token']}"}

    return _register


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def admin_headers(register: Callable[[], Awaitable[tuple[int, Headers]]]) -> Headers:
    user_id, headers = await register()
    async with async_session_factory() as db:
        await db.execute(text("UPDATE users SET is_admin = TRUE WHERE id = :id"), {"id": user_id})
        await db.commit()
    return headers


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def fund(
    client: AsyncClient, admin_headers: Headers
) -> Callable[[Headers, str], Awaitable[None]]:
    """Credit a wallet through the admin-approved (nagad) deposit path."""

    async def _fund(headers: Headers, amount: str) -> None:
        resp = await client.post(
            "/api/v1/wallet/deposit",
            json={"amount": amount, "method": "nagad", "phone": "01811111111"},
            headers=headers,
        )
        assert resp.status_code == 202, resp.text
        tx_id = resp.json()["data"]["transaction"]["id"]
        approve = await client.post(
            f"/api/v1/admin/transactions/{tx_id}/approve", headers=admin_headers
        )
        assert approve.status_code == 200, approve.text

    return _fund


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def new_tournament(
    client: AsyncClient, admin_headers: Headers
) -> Callable[..., Awaitable[dict[str, Any]]]:
    async def _create(max_slots: int = 10, entry_fee: str = "200.00") -> dict[str, Any]:
        resp = await client.post(
            "/api/v1/admin/tournaments",
            json={
                "title": f"Test Cup {uuid.uuid4().hex[:6]}",
                "entry_fee": entry_fee,
                "prize_pool": "1000.00",
                "max_slots": max_slots,
                "start_time": (datetime.now(UTC) + timedelta(days=1)).isoformat(),
                "mode": "solo",
            },
            headers=admin_headers,
        )
        assert resp.status_code == 201, resp.text
        return dict(resp.json()["data"])

    return _create
