"""Tests for the HTTP surface: status mapping, validation and rate limiting."""
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from hf_wrapped.api.server import app, get_generator, get_settings
from hf_wrapped.errors import NotFoundError, RefreshWindowClosedError
from hf_wrapped.settings import Settings

pytestmark = pytest.mark.asyncio

calls = []


async def fake_generator(req, settings):
    calls.append(req)
    if req.handle == "ghost":
        raise NotFoundError("ghost", ["ghost"])
    if req.allow_refresh:
        raise RefreshWindowClosedError(req.year or 2025, datetime(2026, 1, 1, tzinfo=timezone.utc))
    if req.handle == "broken":
        raise RuntimeError("hub exploded")
    return {"profile": {"handle": req.handle}, "year": req.year or 2025, "cached": False}


def _settings(**overrides):
    values = {"dataset_id": "", "rate_limit_enabled": False, "rate_limit_max": 2, "rate_limit_window_ms": 60_000}
    values.update(overrides)
    return Settings(**values)


@pytest_asyncio.fixture
async def client():
    calls.clear()
    app.state.rate_limiter = None
    app.dependency_overrides[get_settings] = lambda: _settings()
    app.dependency_overrides[get_generator] = lambda: fake_generator
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
    app.state.rate_limiter = None


async def test_health(client):
    r = await client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


async def test_wrapped_ok(client):
    r = await client.post("/api/wrapped", json={"handle": "  acme ", "year": 2025, "subjectType": "organization"})
    assert r.status_code == 200
    assert r.json()["profile"]["handle"] == "acme"
    [req] = calls
    assert req.subject_type == "organization"
    assert req.allow_refresh is None


async def test_unknown_handle_is_404(client):
    r = await client.post("/api/wrapped", json={"handle": "ghost"})
    assert r.status_code == 404
    assert "Handle not found" in r.json()["detail"]


async def test_refresh_after_freeze_is_403(client):
    r = await client.post("/api/wrapped", json={"handle": "acme", "allowRefresh": True})
    assert r.status_code == 403
    assert "Refresh window is closed" in r.json()["detail"]


async def test_unexpected_failure_is_500(client):
    r = await client.post("/api/wrapped", json={"handle": "broken"})
    assert r.status_code == 500
    assert r.json()["detail"] == "hub exploded"


@pytest.mark.parametrize("body", [
    {},
    {"handle": "a"},
    {"handle": "x" * 81},
    {"handle": "acme", "year": 1999},
    {"handle": "acme", "subjectType": "team"},
])
async def test_invalid_request_is_422(client, body):
    r = await client.post("/api/wrapped", json=body)
    assert r.status_code == 422
    assert calls == []


async def test_rate_limit_per_client_ip(client):
    app.dependency_overrides[get_settings] = lambda: _settings(rate_limit_enabled=True)
    headers = {"x-forwarded-for": "203.0.113.7, 10.0.0.1"}

    statuses = [
        (await client.post("/api/wrapped", json={"handle": "acme"}, headers=headers)).status_code
        for _ in range(3)
    ]
    other = await client.post("/api/wrapped", json={"handle": "acme"}, headers={"x-real-ip": "198.51.100.2"})

    assert statuses == [200, 200, 429]
    assert other.status_code == 200
    assert len(calls) == 3


async def test_rate_limit_disabled_by_default(client):
    for _ in range(5):
        r = await client.post("/api/wrapped", json={"handle": "acme"})
        assert r.status_code == 200
