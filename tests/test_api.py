"""HTTP API tests against a temporary SQLite database."""

from __future__ import annotations

from contextlib import asynccontextmanager

import pytest
from httpx import ASGITransport, AsyncClient

from trade_journal.db import Database
from trade_journal.main import create_app


@asynccontextmanager
async def _client(database: Database):
    app = create_app(database)
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


BUY = {
    "id": "b1",
    "stock_code": "2330",
    "date": "2024-01-02",
    "side": "BUY",
    "price": 100,
    "shares": 1000,
    "phase": "TRIAL",
    "note": "first entry",
}
SELL = {
    "id": "s1",
    "stock_code": "2330",
    "date": "2024-02-01",
    "side": "SELL",
    "price": 110,
    "shares": 500,
}


async def test_health(database: Database):
    async with _client(database) as client:
        response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_trade_lifecycle_and_portfolio(database: Database):
    async with _client(database) as client:
        created = await client.post("/trades", json=BUY)
        assert created.status_code == 201
        body = created.json()
        assert body["fee"] == 42
        assert body["net_cash_effect"] == 100_042
        assert body["timestamp"] == 1704153600000

        assert (await client.post("/trades", json=SELL)).status_code == 201
        assert (await client.post("/trades", json=SELL)).status_code == 409

        trades = (await client.get("/trades")).json()
        assert [t["id"] for t in trades] == ["b1", "s1"]

        portfolio = (await client.get("/portfolio")).json()
        [summary] = portfolio["summaries"]
        assert summary["shares_held"] == 500
        assert summary["current_price"] == 110
        assert summary["realized_pl"] == pytest.approx(4_791)
        stats = portfolio["stats"]
        assert stats["cash_balance"] == pytest.approx(1_000_000 - 100_042 + 54_812)
        assert stats["trade_count"] == 2

        closed = (await client.get("/portfolio/closed-trades")).json()
        assert len(closed) == 1
        assert closed[0]["entry_date"] == "2024-01-02"
        assert closed[0]["sell_proceeds"] == 54_812

        updated = await client.put("/trades/s1", json={**SELL, "shares": 1000})
        assert updated.status_code == 200
        portfolio = (await client.get("/portfolio")).json()
        assert portfolio["summaries"][0]["shares_held"] == 0

        assert (await client.delete("/trades/s1")).status_code == 204
        assert (await client.delete("/trades/s1")).status_code == 404
        assert (await client.put("/trades/missing", json=SELL)).status_code == 404
        trades = (await client.get("/trades")).json()
        assert [t["id"] for t in trades] == ["b1"]


async def test_invalid_trade_is_rejected(database: Database):
    async with _client(database) as client:
        response = await client.post("/trades", json={**BUY, "price": 0})
        assert response.status_code == 422
        response = await client.post("/trades", json={**BUY, "stock_code": "   "})
        assert response.status_code == 422


async def test_price_overrides(database: Database):
    async with _client(database) as client:
        await client.post("/trades", json=BUY)
        response = await client.put("/portfolio/prices/2330", json={"price": 120})
        assert response.status_code == 200
        summary = (await client.get("/portfolio")).json()["summaries"][0]
        assert summary["current_price"] == 120

        assert (await client.delete("/portfolio/prices/2330")).status_code == 204
        assert (await client.delete("/portfolio/prices/2330")).status_code == 404
        summary = (await client.get("/portfolio")).json()["summaries"][0]
        assert summary["current_price"] == 100


async def test_capital_setting(database: Database):
    async with _client(database) as client:
        assert (await client.get("/settings/capital")).json() == {"capital": 1_000_000}
        response = await client.put("/settings/capital", json={"capital": 500_000})
        assert response.json() == {"capital": 500_000}
        assert (await client.put("/settings/capital", json={"capital": -1})).status_code == 422
        stats = (await client.get("/portfolio")).json()["stats"]
        assert stats["total_capital"] == 500_000


async def test_cost_preview(database: Database):
    async with _client(database) as client:
        response = await client.post(
            "/portfolio/cost", json={"price": 110, "shares": 500, "side": "SELL", "is_etf": False}
        )
    assert response.json() == {"gross_value": 55_000, "fee": 23, "tax": 165, "net_cash_effect": 54_812}


async def test_journal_entries(database: Database):
    async with _client(database) as client:
        first = await client.post("/journal", json={"date": "2024-01-02", "content": "Plan the week", "stock_code": "2330"})
        assert first.status_code == 201
        second = await client.post("/journal", json={"date": "2024-01-05", "content": "Review"})
        entry_id = first.json()["id"]

        entries = (await client.get("/journal")).json()
        assert [e["id"] for e in entries] == [second.json()["id"], entry_id]

        updated = await client.put(f"/journal/{entry_id}", json={"date": "2024-01-02", "content": "Revised plan"})
        assert updated.json()["content"] == "Revised plan"
        assert (await client.delete(f"/journal/{entry_id}")).status_code == 204
        assert (await client.put(f"/journal/{entry_id}", json={"date": "2024-01-02", "content": "x"})).status_code == 404
        assert len((await client.get("/journal")).json()) == 1


async def test_export_then_import(database: Database):
    async with _client(database) as client:
        await client.post("/trades", json=BUY)
        await client.post("/trades", json=SELL)
        await client.post("/journal", json={"date": "2024-02-02", "content": "Took partial profit"})
        await client.put("/settings/capital", json={"capital": 800_000})

        exported = await client.get("/data/export")
        assert exported.status_code == 200
        assert exported.headers["content-type"].startswith("text/csv")
        assert "attachment" in exported.headers["content-disposition"]
        csv_text = exported.content.decode("utf-8")

        await client.delete("/trades/s1")
        await client.put("/settings/capital", json={"capital": 1})

        imported = await client.post("/data/import", content=csv_text.encode("utf-8"))
        assert imported.status_code == 200
        assert imported.json() == {"trades": 2, "journal_entries": 1, "capital": 800_000, "skipped_rows": 0}

        trades = (await client.get("/trades")).json()
        assert [t["id"] for t in trades] == ["b1", "s1"]
        assert (await client.get("/settings/capital")).json() == {"capital": 800_000}
        assert len((await client.get("/journal")).json()) == 1


async def test_import_rejects_non_utf8(database: Database):
    async with _client(database) as client:
        response = await client.post("/data/import", content=b"\xff\xfe\x00bad")
    assert response.status_code == 400
