"""Unit tests for middleware."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware


def _create_app_with_middleware() -> FastAPI:
    """Create a minimal FastAPI app with the full middleware stack."""
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/test")
    async def _():
        return {"ok": True}

    return app


async def _get(headers: dict[str, str] | None = None):
    app = _create_app_with_middleware()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        return await c.get("/test", headers=headers)


class TestSecurityHeadersMiddleware:
    """Tests for SecurityHeadersMiddleware."""

    @pytest.mark.asyncio
    async def test_adds_all_security_headers(self):
        response = await _get()

        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"
        assert response.headers["referrer-policy"] == "strict-origin-when-cross-origin"


class TestRequestIDMiddleware:
    """Tests for RequestIDMiddleware."""

    @pytest.mark.asyncio
    async def test_generates_request_id_when_not_provided(self):
        response = await _get()

        assert len(response.headers["x-request-id"]) == 36

    @pytest.mark.asyncio
    async def test_propagates_existing_request_id(self):
        response = await _get({"X-Request-ID": "custom-req-123"})

        assert response.headers["x-request-id"] == "custom-req-123"

    @pytest.mark.asyncio
    async def test_replaces_unsafe_request_id(self):
        response = await _get({"X-Request-ID": "bad id with spaces" + "x" * 80})

        assert response.headers["x-request-id"] != "bad id with spaces" + "x" * 80
        assert len(response.headers["x-request-id"]) == 36

    @pytest.mark.asyncio
    async def test_generated_ids_differ(self):
        app = _create_app_with_middleware()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            r1 = await c.get("/test")
            r2 = await c.get("/test")

        assert r1.headers["x-request-id"] != r2.headers["x-request-id"]


class TestRequestLoggingMiddleware:
    @pytest.mark.asyncio
    async def test_passes_response_through(self):
        response = await _get()

        assert response.status_code == 200
        assert response.json() == {"ok": True}
