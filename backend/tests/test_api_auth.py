"""
Sparkz Backend: Auth Endpoint Tests
====================================

What:  Signup/login and the authorization gate, end to end over ASGI.
How:   Real app + SQLite test database + scripted Mux (see conftest.py).
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from app.database import async_session_factory
from app.models.user import User
from app.services.security import issue_token


async def count_users() -> int:
    async with async_session_factory() as session:
        return (await session.execute(select(func.count(User.id)))).scalar_one()


class TestSignup:

    @pytest.mark.asyncio
    async def test_signup_returns_token_and_user(self, test_client, fake_mux):
        response = await test_client.post(
            "/api/auth/signup",
            json={"email": "dj@example.com", "password": "pw-123456", "djName": "DJ One"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["token"]
        assert body["user"]["email"] == "dj@example.com"
        assert body["user"]["dj_name"] == "DJ One"
        assert "password" not in body["user"]
        assert len(fake_mux.calls("POST", "/live-streams")) == 1

    @pytest.mark.asyncio
    async def test_signup_stores_provider_credentials(self, test_client, fake_mux):
        response = await test_client.post(
            "/api/auth/signup",
            json={"email": "dj@example.com", "password": "pw-123456", "djName": "DJ One"},
        )
        user_id = response.json()["user"]["id"]

        async with async_session_factory() as session:
            user = await session.get(User, user_id)
        assert user.stream_key == "sk-1"
        assert user.mux_stream_id == "ls-1"
        assert user.playback_id == "pb-1"
        assert user.password.startswith("$2b$")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failure", [500, 401, "connect"])
    async def test_provider_failure_creates_no_user(self, test_client, fake_mux, failure):
        fake_mux.fail_create = failure

        response = await test_client.post(
            "/api/auth/signup",
            json={"email": "dj@example.com", "password": "pw-123456", "djName": "DJ One"},
        )

        assert response.status_code == 502
        body = response.json()
        assert body["error"] == "upstream_error"
        assert body["message"] == "Failed to create stream"
        assert "nope" not in response.text
        assert await count_users() == 0

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts_without_provider_call(self, test_client, fake_mux, make_user):
        await make_user(email="dj@example.com")
        provisions_before = len(fake_mux.calls("POST", "/live-streams"))

        response = await test_client.post(
            "/api/auth/signup",
            json={"email": "dj@example.com", "password": "other-pass", "djName": "Copycat"},
        )

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"
        assert len(fake_mux.calls("POST", "/live-streams")) == provisions_before
        assert await count_users() == 1

    @pytest.mark.asyncio
    async def test_missing_fields_rejected_before_store(self, test_client, fake_mux):
        response = await test_client.post(
            "/api/auth/signup",
            json={"email": "dj@example.com"},
            headers={"X-Request-ID": "trace-422"},
        )

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["request_id"] == "trace-422"
        assert "detail" not in body
        assert {tuple(d["loc"]) for d in body["details"]} == {
            ("body", "password"),
            ("body", "djName"),
        }
        assert fake_mux.requests == []

    @pytest.mark.asyncio
    async def test_password_over_72_bytes_rejected(self, test_client, fake_mux):
        response = await test_client.post(
            "/api/auth/signup",
            json={"email": "dj@example.com", "password": "é" * 40, "djName": "DJ"},
        )

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"] == [{"loc": ["body", "password"], "msg": body["details"][0]["msg"]}]
        assert "é" * 40 not in response.text
        assert fake_mux.requests == []


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_accepts_the_padded_email_used_at_signup(self, test_client, fake_mux):
        credentials = {"email": "  dj@example.com ", "password": "pw-123456"}
        signup = await test_client.post("/api/auth/signup", json={**credentials, "djName": "DJ"})
        assert signup.status_code == 200
        assert signup.json()["user"]["email"] == "dj@example.com"

        response = await test_client.post("/api/auth/login", json=credentials)

        assert response.status_code == 200
        assert response.json()["user"]["id"] == signup.json()["user"]["id"]

    @pytest.mark.asyncio
    async def test_login_returns_fresh_token(self, test_client, make_user):
        _, user_id = await make_user(email="dj@example.com", password="pw-123456", dj_name="DJ")

        response = await test_client.post(
            "/api/auth/login", json={"email": "dj@example.com", "password": "pw-123456"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["user"] == {"id": user_id, "email": "dj@example.com", "dj_name": "DJ"}
        assert body["token"]

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_the_same(self, test_client, make_user):
        await make_user(email="dj@example.com", password="pw-123456")

        wrong = await test_client.post(
            "/api/auth/login", json={"email": "dj@example.com", "password": "nope-nope"}
        )
        unknown = await test_client.post(
            "/api/auth/login", json={"email": "ghost@example.com", "password": "nope-nope"}
        )

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json()["message"] == unknown.json()["message"] == "Invalid email or password"


class TestAuthorizationGate:

    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, test_client):
        response = await test_client.post("/api/streams", json={"name": "Set"})

        assert response.status_code == 401
        assert response.json()["error"] == "unauthenticated"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", ["Token abc", "Bearer", "Bearer not.a.jwt", "Basic dXNlcjpwYXNz"])
    async def test_malformed_header_is_401(self, test_client, header):
        response = await test_client.post(
            "/api/streams", json={"name": "Set"}, headers={"Authorization": header}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Authentication required"

    @pytest.mark.asyncio
    async def test_expired_token_is_401(self, test_client, make_user):
        _, user_id = await make_user()
        expired = issue_token(user_id, now=datetime.now(timezone.utc) - timedelta(days=8))

        response = await test_client.post(
            "/api/streams", json={"name": "Set"}, headers={"Authorization": f"Bearer {expired}"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_valid_token_passes(self, test_client, make_user):
        token, _ = await make_user()

        response = await test_client.post(
            "/api/streams", json={"name": "Set"}, headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 200
