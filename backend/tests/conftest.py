"""
Sparkz Backend: Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment is set before any `app` import, so the Settings singleton
       and the engine are built against a throwaway SQLite file.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── db: creates all tables, drops them afterwards
    ├── fake_mux: MuxClient over httpx.MockTransport, patched into services
    ├── test_client: HTTPX AsyncClient bound to the ASGI app
    ├── make_user: signs a user up through the API, returns (token, id)
    └── png_bytes: factory for real PNG images of a given size
"""

import io
import os
import tempfile
from typing import Callable, List
from unittest.mock import AsyncMock, MagicMock, patch

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup (before any app import)
# ══════════════════════════════════════════════════════════════════════════

_test_dir = tempfile.mkdtemp(prefix="sparkz_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_test_dir}/sparkz_test.db"
os.environ["JWT_SECRET"] = "test-jwt-secret-0123456789abcdef-0123456789"
os.environ["MUX_TOKEN_ID"] = "test-mux-token-id"
os.environ["MUX_TOKEN_SECRET"] = "test-mux-token-secret"
os.environ["BCRYPT_ROUNDS"] = "4"  # Keep hashing fast in tests
os.environ["DB_CREATE_TABLES"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from PIL import Image  # noqa: E402

from app.services.mux_client import MuxClient  # noqa: E402

MUX_TEST_BASE_URL = "https://mux.test"


# ══════════════════════════════════════════════════════════════════════════
# Fake Mux
# ══════════════════════════════════════════════════════════════════════════

class FakeMux:
    """
    Scripted Mux API. Every request is recorded in `requests`.

    Set `fail_create`, `fail_reset` or `fail_delete` to a status code to make
    that call return an error, or to "connect" to raise a transport error.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.fail_create = None
        self.fail_reset = None
        self.fail_delete = None
        self._counter = 0

    def _maybe_fail(self, mode, request):
        if mode == "connect":
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(mode, json={"error": {"type": "invalid_parameters", "messages": ["nope"]}})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "POST" and path == "/video/v1/live-streams":
            if self.fail_create:
                return self._maybe_fail(self.fail_create, request)
            self._counter += 1
            return httpx.Response(201, json={
                "data": {
                    "id": f"ls-{self._counter}",
                    "stream_key": f"sk-{self._counter}",
                    "playback_ids": [{"id": f"pb-{self._counter}", "policy": "public"}],
                }
            })

        if request.method == "POST" and path.endswith("/reset-stream-key"):
            if self.fail_reset:
                return self._maybe_fail(self.fail_reset, request)
            self._counter += 1
            return httpx.Response(201, json={"data": {"stream_key": f"sk-rotated-{self._counter}"}})

        if request.method == "DELETE" and path.startswith("/video/v1/live-streams/"):
            if self.fail_delete:
                return self._maybe_fail(self.fail_delete, request)
            return httpx.Response(204)

        return httpx.Response(404, json={"error": {"type": "not_found", "messages": ["unknown path"]}})

    def calls(self, method: str, suffix: str = "") -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path.endswith(suffix)]


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = user
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.get = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db():
    """Fresh schema per test on the SQLite test database."""
    from app import models  # noqa: F401
    from app.database import Base, engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def fake_mux():
    """A real MuxClient talking to FakeMux, patched into the services."""
    fake = FakeMux()
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(fake.handler),
        base_url=MUX_TEST_BASE_URL,
    )
    client = MuxClient(
        token_id="test-mux-token-id",
        token_secret="test-mux-token-secret",
        base_url=MUX_TEST_BASE_URL,
        client=http_client,
    )
    with patch("app.services.auth_service.mux_client", client), \
         patch("app.services.user_service.mux_client", client):
        yield fake
    await http_client.aclose()


@pytest_asyncio.fixture
async def test_client(db, fake_mux):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/api/health")
            assert response.status_code == 200
    """
    from app.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_user(test_client):
    """Signs a user up through the API and returns (token, user_id)."""

    async def _make_user(
        email: str = "dj@example.com",
        password: str = "correct horse battery",
        dj_name: str = "DJ Test",
    ):
        response = await test_client.post(
            "/api/auth/signup",
            json={"email": email, "password": password, "djName": dj_name},
        )
        assert response.status_code == 200, response.text
        body = response.json()
        return body["token"], body["user"]["id"]

    return _make_user


@pytest.fixture
def png_bytes() -> Callable[..., bytes]:
    """Factory for real PNG images."""

    def _png(width: int = 400, height: int = 300, color=(200, 30, 30), mode: str = "RGB") -> bytes:
        img = Image.new(mode, (width, height), color)
        out = io.BytesIO()
        img.save(out, format="PNG")
        return out.getvalue()

    return _png
