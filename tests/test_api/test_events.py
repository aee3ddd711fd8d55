"""Tests for the SSE endpoint guards: event_type allowlist, connection cap, health.

Only the non-streaming paths are exercised here: 400 and 429 are raised
before the stream opens, so a plain GET returns at once.
"""

from __future__ import annotations

import asyncio

import pytest
from httpx import ASGITransport, AsyncClient

from clubhouse.config import Settings
from clubhouse.core.event_bus import EventBus
from clubhouse.main import create_app


@pytest.fixture
async def sse_app():
    settings = Settings(database_url="sqlite+aiosqlite:///:memory:", max_sse_connections=2)
    app = create_app(settings)
    app.state.event_bus = EventBus()
    return app


@pytest.fixture
async def sse_client(sse_app):
    transport = ASGITransport(app=sse_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class TestEventTypeValidation:
    async def test_unknown_event_type_returns_400(self, sse_client) -> None:
        resp = await sse_client.get("/api/events/stream", params={"event_type": "game.completed"})
        assert resp.status_code == 400
        assert "standings.updated" in resp.json()["detail"]

    async def test_empty_event_type_returns_400(self, sse_client) -> None:
        resp = await sse_client.get("/api/events/stream", params={"event_type": ""})
        assert resp.status_code == 400


class TestConnectionLimit:
    async def test_full_slots_return_429(self, sse_app, sse_client) -> None:
        slots: asyncio.Semaphore = sse_app.state.sse_slots
        await slots.acquire()
        await slots.acquire()
        try:
            resp = await sse_client.get("/api/events/stream")
            assert resp.status_code == 429
        finally:
            slots.release()
            slots.release()


class TestHealth:
    async def test_reports_bus_state(self, sse_app, sse_client) -> None:
        resp = await sse_client.get("/api/events/health")
        assert resp.json() == {
            "status": "ok",
            "subscribers": 0,
            "active_sse_connections": 0,
            "max_sse_connections": 2,
        }

        sse_app.state.event_bus.close()
        resp = await sse_client.get("/api/events/health")
        assert resp.json()["status"] == "closed"
