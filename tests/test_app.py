"""
Тесты служебных endpoints и middleware.
"""
from uuid import uuid4

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from app.core.config import settings
from app.middleware.metrics import normalize_path
from app.middleware.rate_limit import RateLimitMiddleware


@pytest.mark.asyncio
async def test_root_and_health(client: AsyncClient):
    root = await client.get("/")
    assert root.status_code == 200
    assert root.json()["message"] == "BOMAudit API"

    health = await client.get("/health")
    assert health.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_response_headers(client: AsyncClient):
    response = await client.get("/health", headers={"X-Request-ID": "req-42"})

    assert response.headers["X-Request-ID"] == "req-42"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert "X-Response-Time" in response.headers


@pytest.mark.asyncio
async def test_api_responses_not_cached(client: AsyncClient, auth_headers):
    response = await client.get("/api/v1/doc-checks/", headers=auth_headers)

    assert response.headers["Cache-Control"] == "no-store"
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_metrics_endpoint(client: AsyncClient, upload_bom):
    await upload_bom()

    response = await client.get("/metrics")

    assert response.status_code == 200
    assert "bom_checks_processed_total" in response.text
    assert "http_requests_total" in response.text


def test_normalize_path():
    assert (
        normalize_path("/api/v1/bom-checks/3f2b8a6e-1c2d-4e5f-8a9b-0c1d2e3f4a5b/items")
        == "/api/v1/bom-checks/{id}/items"
    )
    assert normalize_path("/api/v1/bom-checks/summary") == "/api/v1/bom-checks/summary"


@pytest.mark.asyncio
async def test_readiness(client: AsyncClient):
    response = await client.get("/health/ready")

    assert response.status_code == 200
    assert response.json() == {"status": "ready", "database": "ok", "redis": "ok"}


@pytest.mark.asyncio
async def test_readiness_without_redis(client: AsyncClient, mock_redis, monkeypatch):
    async def broken_ping():
        raise ConnectionError("redis is down")

    monkeypatch.setattr(mock_redis, "ping", broken_ping)

    response = await client.get("/health/ready")

    assert response.status_code == 503
    assert response.json()["redis"] == "unavailable"


@pytest.mark.asyncio
async def test_error_body_carries_request_id(client: AsyncClient, auth_headers):
    response = await client.post(
        f"/api/v1/corrections/{uuid4()}/approve",
        headers={**auth_headers, "X-Request-ID": "req-404"},
    )

    assert response.status_code == 404
    assert response.headers["X-Request-ID"] == "req-404"
    assert response.json()["error"]["request_id"] == "req-404"


@pytest.mark.asyncio
async def test_rate_limit(mock_redis):
    """Тяжелые операции ограничиваются отдельно от остальных запросов."""
    limited = FastAPI()
    limited.add_middleware(RateLimitMiddleware, calls=3, period=60)

    @limited.get("/api/v1/bom-checks/")
    async def list_checks():
        return {"ok": True}

    @limited.post("/api/v1/bom-checks/upload")
    async def upload():
        return {"ok": True}

    async with AsyncClient(transport=ASGITransport(app=limited), base_url="http://test") as ac:
        for _ in range(settings.UPLOAD_RATE_LIMIT_CALLS):
            assert (await ac.post("/api/v1/bom-checks/upload")).status_code == 200

        blocked = await ac.post("/api/v1/bom-checks/upload")
        assert blocked.status_code == 429
        assert blocked.headers["Retry-After"] == "60"
        assert blocked.json()["error"]["code"] == "RATE_LIMIT_EXCEEDED"

        for _ in range(3):
            assert (await ac.get("/api/v1/bom-checks/")).status_code == 200
        assert (await ac.get("/api/v1/bom-checks/")).status_code == 429
