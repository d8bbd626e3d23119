"""
Sparkz Backend: Auth Service Unit Tests
========================================

What:  Tests for AuthService signup/login orchestration.
How:   Mock DB session and a patched Mux client (no real DB or API calls).

What we test:
    ✅ Known duplicate email never reaches Mux
    ✅ Failed provision inserts nothing
    ✅ Lost insert race releases the provisioned stream and answers 409
    ✅ Unknown email and wrong password fail the same way
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import IntegrityError

from app.exceptions import AuthenticationError, ConflictError, UpstreamServiceError
from app.models.user import User
from app.services.auth_service import INVALID_CREDENTIALS, AuthService
from app.services.mux_client import LiveStreamCredentials
from app.services.security import hash_password, verify_token


def lookup_returns(session, user):
    result = MagicMock()
    result.scalar_one_or_none.return_value = user
    session.execute.return_value = result


def make_mux(credentials=None, create_error=None):
    mux = MagicMock()
    mux.create_live_stream = AsyncMock(
        return_value=credentials or LiveStreamCredentials("sk-1", "ls-1", "pb-1"),
        side_effect=create_error,
    )
    mux.delete_live_stream = AsyncMock(return_value=True)
    return mux


class TestSignup:

    def setup_method(self):
        self.service = AuthService()

    @pytest.mark.asyncio
    async def test_signup_success(self, mock_db_session):
        lookup_returns(mock_db_session, None)

        async def assign_id():
            mock_db_session.add.call_args[0][0].id = 11
        mock_db_session.flush = AsyncMock(side_effect=assign_id)

        mux = make_mux()
        with patch("app.services.auth_service.mux_client", mux):
            result = await self.service.signup(
                mock_db_session, email="a@b.co", password="pw-123", dj_name="DJ A"
            )

        user = mock_db_session.add.call_args[0][0]
        assert isinstance(user, User)
        assert user.password != "pw-123"
        assert user.password.startswith("$2b$")
        assert (user.stream_key, user.mux_stream_id, user.playback_id) == ("sk-1", "ls-1", "pb-1")

        assert result.user.id == 11
        assert result.user.email == "a@b.co"
        assert result.user.dj_name == "DJ A"
        assert verify_token(result.token) == 11
        mux.delete_live_stream.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_email_skips_provider(self, mock_db_session):
        lookup_returns(mock_db_session, User(id=1, email="a@b.co", password="x"))
        mux = make_mux()

        with patch("app.services.auth_service.mux_client", mux):
            with pytest.raises(ConflictError):
                await self.service.signup(
                    mock_db_session, email="a@b.co", password="pw", dj_name="DJ"
                )

        mux.create_live_stream.assert_not_awaited()
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_provider_failure_inserts_nothing(self, mock_db_session):
        lookup_returns(mock_db_session, None)
        mux = make_mux(create_error=UpstreamServiceError(message="Failed to create stream"))

        with patch("app.services.auth_service.mux_client", mux):
            with pytest.raises(UpstreamServiceError):
                await self.service.signup(
                    mock_db_session, email="a@b.co", password="pw", dj_name="DJ"
                )

        mock_db_session.add.assert_not_called()
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lost_insert_race_releases_stream(self, mock_db_session):
        lookup_returns(mock_db_session, None)
        mock_db_session.flush = AsyncMock(
            side_effect=IntegrityError("INSERT INTO sparkz_users", {}, Exception("unique"))
        )
        mux = make_mux(credentials=LiveStreamCredentials("sk-9", "ls-9", "pb-9"))

        with patch("app.services.auth_service.mux_client", mux):
            with pytest.raises(ConflictError) as exc_info:
                await self.service.signup(
                    mock_db_session, email="a@b.co", password="pw", dj_name="DJ"
                )

        assert exc_info.value.message == "Email already exists"
        mux.delete_live_stream.assert_awaited_once_with("ls-9")


class TestLogin:

    def setup_method(self):
        self.service = AuthService()

    @pytest.mark.asyncio
    async def test_login_success(self, mock_db_session):
        user = User(id=3, email="a@b.co", password=hash_password("pw-123"), dj_name="DJ")
        lookup_returns(mock_db_session, user)

        result = await self.service.login(mock_db_session, email="a@b.co", password="pw-123")

        assert result.user.id == 3
        assert verify_token(result.token) == 3

    @pytest.mark.asyncio
    async def test_unknown_email_runs_dummy_verify(self, mock_db_session):
        lookup_returns(mock_db_session, None)

        with patch("app.services.auth_service.dummy_verify") as dummy:
            with pytest.raises(AuthenticationError) as exc_info:
                await self.service.login(mock_db_session, email="x@y.z", password="pw")

        dummy.assert_called_once()
        assert exc_info.value.message == INVALID_CREDENTIALS

    @pytest.mark.asyncio
    async def test_wrong_password_same_message(self, mock_db_session):
        user = User(id=3, email="a@b.co", password=hash_password("pw-123"))
        lookup_returns(mock_db_session, user)

        with pytest.raises(AuthenticationError) as exc_info:
            await self.service.login(mock_db_session, email="a@b.co", password="pw-124")

        assert exc_info.value.message == INVALID_CREDENTIALS
