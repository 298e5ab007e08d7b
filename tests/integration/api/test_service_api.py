"""
Integration tests for health, metrics and rate limiting.

Usage:
    pytest tests/integration/api/test_service_api.py
"""

import pytest_asyncio

from coffre.config.settings import override_settings
from coffre.di.container import reset_container
from tests.integration.api.conftest import build_harness


async def _limited_harness(settings, **overrides):
    """Application with a two-request burst and a very slow refill."""
    limited = settings.model_copy(
        update={
            "RATE_LIMIT_ENABLED": True,
            "RATE_LIMIT_BURST_SIZE": 2,
            "RATE_LIMIT_REQUESTS_PER_SECOND": 0.01,
            **overrides,
        }
    )
    override_settings(limited)
    reset_container()
    return await build_harness(limited)


@pytest_asyncio.fixture
async def limited_api(settings):
    harness = await _limited_harness(settings)

    yield harness

    await harness.client.aclose()
    await harness.container.shutdown()


@pytest_asyncio.fixture
async def proxied_api(settings):
    """Rate-limited application behind a trusted local proxy."""
    harness = await _limited_harness(settings, TRUSTED_PROXIES=["127.0.0.0/8"])

    yield harness

    await harness.client.aclose()
    await harness.container.shutdown()


class TestHealth:
    """Liveness, readiness and root endpoints."""

    async def test_live(self, api):
        response = await api.client.get("/api/health/live")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_ready(self, api):
        response = await api.client.get("/api/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["checks"]["database"] == "ok"
        assert body["executor"]["pending"] == 0

    async def test_root(self, api):
        response = await api.client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "Coffre"
        assert response.json()["network"] == "mainnet"

    async def test_unknown_route_uses_error_envelope(self, api):
        response = await api.client.get("/api/nope")

        assert response.status_code == 404
        assert response.json()["success"] is False
        assert response.json()["error"] == "HTTP_ERROR"

    async def test_request_id_header(self, api):
        response = await api.client.get(
            "/api/health/live", headers={"X-Request-ID": "req-123"}
        )

        assert response.headers["X-Request-ID"] == "req-123"


class TestMetrics:
    """GET /metrics."""

    async def test_exposes_request_counters(self, api):
        await api.client.get("/api/health/live")

        response = await api.client.get("/metrics")

        assert response.status_code == 200
        assert "coffre_http_requests_total" in response.text


class TestRateLimit:
    """Per-IP token bucket on API routes."""

    async def test_burst_then_reject(self, limited_api):
        first = await limited_api.client.get("/api/auth/verify")
        second = await limited_api.client.get("/api/auth/verify")
        third = await limited_api.client.get("/api/auth/verify")

        assert first.status_code == 401
        assert first.headers["X-RateLimit-Limit"] == "2"
        assert second.headers["X-RateLimit-Remaining"] == "0"

        assert third.status_code == 429
        assert third.json()["error"] == "RATE_LIMIT_EXCEEDED"
        assert int(third.headers["Retry-After"]) >= 1

    async def test_health_is_exempt(self, limited_api):
        for _ in range(5):
            response = await limited_api.client.get("/api/health/live")
            assert response.status_code == 200

    async def test_forwarded_for_ignored_from_untrusted_peer(self, limited_api):
        statuses = []
        for hop in ("203.0.113.1", "203.0.113.2", "203.0.113.3"):
            response = await limited_api.client.get(
                "/api/auth/verify", headers={"X-Forwarded-For": hop}
            )
            statuses.append(response.status_code)

        assert statuses == [401, 401, 429]

    async def test_forwarded_for_honored_from_trusted_proxy(self, proxied_api):
        for _ in range(2):
            await proxied_api.client.get(
                "/api/auth/verify", headers={"X-Forwarded-For": "203.0.113.1"}
            )

        limited = await proxied_api.client.get(
            "/api/auth/verify", headers={"X-Forwarded-For": "203.0.113.1"}
        )
        other_client = await proxied_api.client.get(
            "/api/auth/verify", headers={"X-Forwarded-For": "203.0.113.2, 10.0.0.1"}
        )

        assert limited.status_code == 429
        assert other_client.status_code == 401

    async def test_unparseable_forwarded_for_falls_back_to_peer(self, proxied_api):
        for _ in range(2):
            await proxied_api.client.get(
                "/api/auth/verify", headers={"X-Forwarded-For": "not-an-ip"}
            )

        response = await proxied_api.client.get("/api/auth/verify")

        assert response.status_code == 429
