"""Tests for cookie/bearer session extraction on protected and optional routes."""

from datetime import datetime, timedelta, timezone

import pytest

from auth import create_session_token

pytestmark = pytest.mark.asyncio


async def test_protected_route_without_token_returns_401(client):
    response = await client.get("/attendance/7/55")

    assert response.status_code == 401
    assert response.json() == {"error": "Missing token"}


async def test_protected_route_with_garbage_token_returns_401(client):
    response = await client.get("/attendance/7/55", headers={"Authorization": "Bearer garbage"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid or expired token"}


async def test_protected_route_with_expired_token_returns_401(client):
    token = create_session_token(7, "a@example.com", issued_at=datetime.now(timezone.utc) - timedelta(hours=1))

    response = await client.get("/attendance/7/55", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid or expired token"}


async def test_malformed_authorization_header_counts_as_missing(client):
    token = create_session_token(7, "a@example.com")

    response = await client.get("/attendance/7/55", headers={"Authorization": f"Bearer {token} extra"})

    assert response.status_code == 401
    assert response.json() == {"error": "Missing token"}


async def test_session_cookie_is_accepted(client, make_user, make_course):
    await make_user(7)
    course = await make_course(7, "CS101")
    client.cookies.set("sessionToken", create_session_token(7, "user7@example.com"))

    response = await client.get(f"/attendance/7/{course.id}")

    assert response.status_code == 200
    assert response.json()["data"]["IndivCourse"] == "CS101"


async def test_me_without_token_reports_logged_out(client):
    response = await client.get("/auth/me")

    assert response.status_code == 200
    assert response.json() == {"ok": False}


async def test_me_ignores_invalid_token(client):
    client.cookies.set("sessionToken", "garbage")

    response = await client.get("/auth/me")

    assert response.status_code == 200
    assert response.json() == {"ok": False}


async def test_me_returns_public_profile(client, make_user):
    await make_user(7, refresh_token="secret-refresh")
    client.cookies.set("sessionToken", create_session_token(7, "user7@example.com"))

    response = await client.get("/auth/me")

    body = response.json()
    assert body["ok"] is True
    assert body["user"] == {
        "id": 7,
        "email_address": "user7@example.com",
        "name": "User 7",
        "image": None,
        "verified": True,
    }


async def test_me_for_deleted_user_reports_logged_out(client):
    client.cookies.set("sessionToken", create_session_token(404, "ghost@example.com"))

    response = await client.get("/auth/me")

    assert response.json() == {"ok": False}
