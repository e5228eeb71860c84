"""Tests for app-wide behaviour: health, security headers, error envelope."""

import pytest

pytestmark = pytest.mark.asyncio


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True}


async def test_security_headers_on_every_response(client):
    for path in ("/health", "/attendance/7/1"):
        response = await client.get(path)

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "SAMEORIGIN"
        assert response.headers["Strict-Transport-Security"].startswith("max-age=")
        assert response.headers["Referrer-Policy"] == "no-referrer"
        assert "default-src 'self'" in response.headers["Content-Security-Policy"]


async def test_unknown_route_uses_error_envelope(client):
    response = await client.get("/nope")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}
