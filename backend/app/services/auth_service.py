"""
Sparkz Backend: Auth Service (Signup / Login)
==============================================

What:  Account creation and credential exchange for bearer tokens.
How:   Composes the password/token helpers in security.py, the Mux client and
       the user table.
Who:   Called by the /auth route handlers.

Signup flow:
    ┌──────────────┐   ┌───────────┐   ┌────────────────┐   ┌────────────┐   ┌───────┐
    │ Email taken? │──▶│ Hash pwd  │──▶│ Mux: provision │──▶│ Insert row │──▶│ Token │
    │   (409)      │   │ (thread)  │   │   (502)        │   │  (409)     │   │       │
    └──────────────┘   └───────────┘   └────────────────┘   └────────────┘   └───────┘

    The pre-check keeps a known duplicate away from the provider. If a
    concurrent signup still wins the unique email between the check and the
    insert, the provisioned live stream is released again before the 409.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from app.exceptions import AuthenticationError, ConflictError, DatabaseError
from app.models.user import User
from app.schemas.auth import AuthResponse, AuthUser
from app.services.mux_client import mux_client
from app.services.security import (
    dummy_verify,
    hash_password,
    issue_token,
    verify_password,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:
    """
    Business logic for signup and login.

    Both operations return an AuthResponse (token + user summary). Errors are
    application exceptions; the global handlers turn them into responses.
    """

    async def signup(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        dj_name: str,
    ) -> AuthResponse:
        """
        Creates an account with its own Mux live stream.

        Raises:
            ConflictError: email already registered
            UpstreamServiceError: Mux could not provision a live stream
            DatabaseError: store failure other than the unique violation
        """
        if await self._find_by_email(db, email) is not None:
            raise ConflictError(message="Email already exists")

        hashed = await run_in_threadpool(hash_password, password)

        # Provision before insert: a failed provision leaves no user row
        credentials = await mux_client.create_live_stream()

        user = User(
            email=email,
            password=hashed,
            dj_name=dj_name,
            stream_key=credentials.stream_key,
            mux_stream_id=credentials.stream_id,
            playback_id=credentials.playback_id,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            logger.warning(
                "Signup lost a race on a duplicate email; releasing live stream %s",
                credentials.stream_id,
            )
            await mux_client.delete_live_stream(credentials.stream_id)
            raise ConflictError(message="Email already exists")
        except SQLAlchemyError as e:
            logger.error("Database error creating user: %s", str(e), exc_info=True)
            await mux_client.delete_live_stream(credentials.stream_id)
            raise DatabaseError(context={"error_type": type(e).__name__})

        logger.info("User %s signed up (mux stream %s)", user.id, credentials.stream_id)
        return self._auth_response(user)

    async def login(self, db: AsyncSession, email: str, password: str) -> AuthResponse:
        """
        Exchanges credentials for a token.

        Unknown email and wrong password are indistinguishable to the caller,
        in message and in bcrypt cost.

        Raises:
            AuthenticationError: credentials do not match
        """
        user = await self._find_by_email(db, email)
        if user is None:
            await run_in_threadpool(dummy_verify)
            raise AuthenticationError(message=INVALID_CREDENTIALS)

        valid = await run_in_threadpool(verify_password, password, user.password)
        if not valid:
            logger.info("Failed login for user %s", user.id)
            raise AuthenticationError(message=INVALID_CREDENTIALS)

        return self._auth_response(user)

    async def _find_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        try:
            result = await db.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up email: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

    @staticmethod
    def _auth_response(user: User) -> AuthResponse:
        return AuthResponse(
            token=issue_token(user.id),
            user=AuthUser.model_validate(user),
        )


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
