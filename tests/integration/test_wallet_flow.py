"""Integration tests for deposit/withdraw settlement and admin moderation."""

import asyncio

import pytest
from httpx import AsyncClient

from src.main import app

pytestmark = [pytest.mark.integration, pytest.mark.asyncio(loop_scope="session")]


async def _balance(client: AsyncClient, headers: dict[str, str]) -> str:
    return str((await client.get("/api/v1/wallet", headers=headers)).json()["data"]["balance"])


async def _tx_status(client: AsyncClient, headers: dict[str, str], tx_id: int) -> str:
    items = (await client.get("/api/v1/wallet/transactions", headers=headers)).json()["data"]["items"]
    return next(str(i["status"]) for i in items if i["id"] == tx_id)


async def _wait_for_status(
    client: AsyncClient, headers: dict[str, str], tx_id: int, status: str, timeout: float = 5.0
) -> str:
    deadline = asyncio.get_running_loop().time() + timeout
    current = await _tx_status(client, headers, tx_id)
    while current != status and asyncio.get_running_loop().time() < deadline:
        await asyncio.sleep(0.1)
        current = await _tx_status(client, headers, tx_id)
    return current


class TestAutoDeposit:
    async def test_pending_then_settled_once(self, client: AsyncClient, register) -> None:
        _, headers = await register()
        resp = await client.post(
            "/api/v1/wallet/deposit",
            json={"amount": "750.00", "method": "bkash", "phone": "01712345678"},
            headers=headers,
        )
        assert resp.status_code == 202
        data = resp.json()["data"]
        assert data["transaction"]["status"] == "pending"
        assert data["settlement"] == "auto"
        assert data["balance"] == "0.00"

        tx_id = data["transaction"]["id"]
        assert await _wait_for_status(client, headers, tx_id, "completed") == "completed"
        assert await _balance(client, headers) == "750.00"

        # A replayed settlement must not credit again
        worker = app.state.settlement_worker
        assert await worker.settle(tx_id) is False
        assert await _balance(client, headers) == "750.00"


class TestAdminDeposit:
    async def test_approve_then_approve_again(
        self, client: AsyncClient, register, admin_headers
    ) -> None:
        _, headers = await register()
        resp = await client.post(
            "/api/v1/wallet/deposit",
            json={"amount": "1000.00", "method": "nagad", "phone": "01812345678"},
            headers=headers,
        )
        data = resp.json()["data"]
        assert data["settlement"] == "admin"
        tx_id = data["transaction"]["id"]

        pending = await client.get("/api/v1/admin/transactions/pending", headers=admin_headers)
        assert tx_id in [i["id"] for i in pending.json()["data"]]

        approve = await client.post(
            f"/api/v1/admin/transactions/{tx_id}/approve", headers=admin_headers
        )
        assert approve.status_code == 200
        assert approve.json()["data"]["user_balance"] == "1000.00"
        assert await _balance(client, headers) == "1000.00"

        again = await client.post(
            f"/api/v1/admin/transactions/{tx_id}/approve", headers=admin_headers
        )
        assert again.status_code == 409
        assert again.json()["code"] == 4002

    async def test_reject_deposit_leaves_balance(
        self, client: AsyncClient, register, admin_headers
    ) -> None:
        _, headers = await register()
        resp = await client.post(
            "/api/v1/wallet/deposit",
            json={"amount": "300.00", "method": "nagad", "phone": "01812345678"},
            headers=headers,
        )
        tx_id = resp.json()["data"]["transaction"]["id"]
        reject = await client.post(
            f"/api/v1/admin/transactions/{tx_id}/reject", headers=admin_headers
        )
        assert reject.status_code == 200
        assert reject.json()["data"]["transaction"]["status"] == "rejected"
        assert await _balance(client, headers) == "0.00"

    async def test_approve_missing(self, client: AsyncClient, admin_headers) -> None:
        resp = await client.post(
            "/api/v1/admin/transactions/999999999/approve", headers=admin_headers
        )
        assert resp.status_code == 404


class TestWithdraw:
    async def test_overdraw_refused(self, client: AsyncClient, register, fund) -> None:
        _, headers = await register()
        await fund(headers, "100.00")
        resp = await client.post(
            "/api/v1/wallet/withdraw",
            json={"amount": "100.01", "method": "bkash", "phone": "01712345678"},
            headers=headers,
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 2001
        assert await _balance(client, headers) == "100.00"

    async def test_withdraw_reserves_then_completes(
        self, client: AsyncClient, register, fund
    ) -> None:
        _, headers = await register()
        await fund(headers, "500.00")
        resp = await client.post(
            "/api/v1/wallet/withdraw",
            json={"amount": "200.00", "method": "nagad", "phone": "01712345678"},
            headers=headers,
        )
        assert resp.status_code == 202
        data = resp.json()["data"]
        assert data["balance"] == "300.00"
        assert data["transaction"]["amount"] == "-200.00"

        tx_id = data["transaction"]["id"]
        assert await _wait_for_status(client, headers, tx_id, "completed") == "completed"
        assert await _balance(client, headers) == "300.00"


class TestLedgerInvariant:
    async def test_invariant_holds_after_mixed_activity(
        self, client: AsyncClient, register, fund, new_tournament, admin_headers
    ) -> None:
        _, headers = await register()
        await fund(headers, "800.00")
        t = await new_tournament(entry_fee="150.00")
        await client.post(f"/api/v1/tournaments/{t['id']}/join", headers=headers)
        await client.post(
            "/api/v1/wallet/withdraw",
            json={"amount": "100.00", "method": "bkash", "phone": "01712345678"},
            headers=headers,
        )

        report = await client.get("/api/v1/admin/invariants", headers=admin_headers)
        assert report.status_code == 200
        assert report.json()["data"] == {"ok": True, "violations": []}
