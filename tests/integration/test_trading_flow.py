"""HTTP flow tests: orders and portfolio, IPO allotment, timed trades, inbox."""

from httpx import AsyncClient


async def _funded(client: AsyncClient, account_id: str, amount: str) -> None:
    await client.post(f"/api/v1/accounts/{account_id}")
    await client.post(f"/api/v1/admin/accounts/{account_id}/approve")
    resp = await client.post(
        f"/api/v1/admin/accounts/{account_id}/adjust",
        json={"amount": amount, "direction": "CREDIT", "reason": "seed"},
    )
    assert resp.status_code == 200


async def _balance(client: AsyncClient, account_id: str) -> dict[str, str]:
    return (await client.get(f"/api/v1/accounts/{account_id}/balance")).json()["data"]


class TestOrders:
    async def test_buy_sell_and_portfolio(self, client: AsyncClient) -> None:
        await _funded(client, "u1", "10000.00")
        for price in ("100.00", "200.00"):
            resp = await client.post(
                "/api/v1/accounts/u1/orders",
                json={"side": "BUY", "symbol": "ACME", "quantity": 10, "price": price},
            )
            assert resp.status_code == 200
        resp = await client.post(
            "/api/v1/accounts/u1/orders",
            json={"side": "SELL", "symbol": "ACME", "quantity": 5, "price": "180.00"},
        )
        assert resp.json()["data"]["realized_pnl"] == "150.00"

        await client.put("/api/v1/admin/prices/acme", json={"price": "160.00"})
        portfolio = (await client.get("/api/v1/accounts/u1/portfolio")).json()["data"]

        [position] = portfolio["positions"]
        assert position["quantity"] == 15
        assert position["avg_cost"] == "150.00"
        assert position["ltp"] == "160.00"
        assert position["unrealized_pnl"] == "150.00"
        assert portfolio["totals"]["realized_pnl"] == "150.00"
        assert portfolio["totals"]["total_pnl"] == "300.00"
        assert (await _balance(client, "u1"))["balance"] == "7900.00"

    async def test_oversell_is_rejected(self, client: AsyncClient) -> None:
        await _funded(client, "u1", "100.00")
        resp = await client.post(
            "/api/v1/accounts/u1/orders",
            json={"side": "SELL", "symbol": "ACME", "quantity": 1, "price": "10.00"},
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 4001


class TestIpo:
    async def test_apply_and_allot(self, client: AsyncClient) -> None:
        await _funded(client, "u1", "20000.00")
        resp = await client.post(
            "/api/v1/admin/ipos",
            json={
                "company_name": "Acme Ltd",
                "symbol": "ACME",
                "price_min": "100.00",
                "price_max": "110.00",
                "lot_size": 50,
                "status": "LIVE",
            },
        )
        ipo_id = resp.json()["data"]["id"]

        resp = await client.post(
            f"/api/v1/accounts/u1/ipos/{ipo_id}/applications", json={"lots": 2}
        )
        app = resp.json()["data"]
        assert app["amount"] == "10000.00"
        assert (await _balance(client, "u1"))["blocked"] == "10000.00"

        pending = (await client.get("/api/v1/admin/pending")).json()["data"]
        assert pending["counts"]["ipo_applications"] == 1

        resp = await client.post(f"/api/v1/admin/ipo-applications/{app['id']}/allot")
        assert resp.json()["data"]["status"] == "ALLOTTED"
        data = await _balance(client, "u1")
        assert data["balance"] == "10000.00"
        assert data["blocked"] == "0.00"

        portfolio = (await client.get("/api/v1/accounts/u1/portfolio")).json()["data"]
        assert portfolio["positions"][0]["quantity"] == 100

    async def test_upcoming_ipo_refuses_applications(self, client: AsyncClient) -> None:
        await _funded(client, "u1", "20000.00")
        resp = await client.post(
            "/api/v1/admin/ipos",
            json={
                "company_name": "Beta",
                "symbol": "BETA",
                "price_min": "10.00",
                "price_max": "12.00",
                "lot_size": 10,
            },
        )
        ipo_id = resp.json()["data"]["id"]
        resp = await client.post(
            f"/api/v1/accounts/u1/ipos/{ipo_id}/applications", json={"lots": 1}
        )
        assert resp.json()["code"] == 5003


class TestTimedTrades:
    async def test_open_and_settle_win(self, client: AsyncClient) -> None:
        await _funded(client, "u1", "1000.00")
        timers = (await client.get("/api/v1/timers")).json()["data"]
        assert [t["duration_minutes"] for t in timers] == [1, 5, 10, 15, 60]

        resp = await client.post(
            "/api/v1/accounts/u1/timed-trades", json={"stake": "100.00", "duration_minutes": 5}
        )
        trade_id = resp.json()["data"]["id"]
        assert (await _balance(client, "u1"))["spendable"] == "900.00"

        resp = await client.post(
            f"/api/v1/admin/timed-trades/{trade_id}/result", json={"result": "WIN"}
        )
        assert resp.json()["data"]["profit_amount"] == "80.00"
        assert (await _balance(client, "u1"))["balance"] == "1080.00"

    async def test_admin_timer_management(self, client: AsyncClient) -> None:
        resp = await client.post("/api/v1/admin/timers", json={"duration_minutes": 30})
        assert resp.json()["data"]["label"] == "30 Minutes"
        await client.post("/api/v1/admin/timers/30/toggle", json={"is_enabled": False})
        timers = (await client.get("/api/v1/timers")).json()["data"]
        assert 30 not in [t["duration_minutes"] for t in timers]

        resp = await client.delete("/api/v1/admin/timers/30")
        assert resp.status_code == 200

    async def test_trading_settings(self, client: AsyncClient) -> None:
        resp = await client.put("/api/v1/admin/trading-settings", json={"profit_rate": "0.75"})
        assert resp.json()["data"]["profit_rate"] == "0.75"
        assert resp.json()["data"]["currency_code"] == "INR"


class TestInboxAndAudit:
    async def test_notifications_and_audit(self, client: AsyncClient) -> None:
        await _funded(client, "u1", "500.00")

        resp = await client.get("/api/v1/accounts/u1/notifications")
        data = resp.json()["data"]
        titles = [n["title"] for n in data["items"]]
        assert titles[0] == "Balance adjusted"
        assert "Account approved" in titles
        assert data["unread"] == len(titles)

        resp = await client.post("/api/v1/accounts/u1/notifications/read-all")
        assert resp.json()["data"]["updated"] == len(titles)

        audit = (await client.get("/api/v1/admin/invariants")).json()["data"]
        assert audit["ok"] is True
        assert audit["accounts_checked"] == 1
