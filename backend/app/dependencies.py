"""
Sparkz Backend: Request Dependencies (Authentication & Ownership)
==================================================================

What:  FastAPI dependencies that establish who is calling and whether they
       may act on the addressed resource.
How:   `get_current_user_id` reads `Authorization: Bearer <token>` and
       verifies it. The `require_*_owner` dependencies build on it: they look
       up the resource owner and compare.
Who:   Declared in route signatures via Depends().

Outcomes:
    no header / wrong scheme / bad token / expired  → 401 (one generic message)
    resource missing                                → 404
    authenticated, not the owner                    → 403
"""

import logging
from typing import Optional

from fastapi import Depends, Header, Path, Request
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import AuthenticationError, DatabaseError, ForbiddenError, NotFoundError
from app.models.schedule import Schedule
from app.models.stream import Stream
from app.services.security import verify_token

logger = logging.getLogger(__name__)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user_id(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> int:
    """
    The authenticated user's id. Also bound to request.state.user_id.

    Raises:
        AuthenticationError: missing, malformed, forged or expired token
    """
    user_id = verify_token(_bearer_token(authorization))
    if user_id is None:
        raise AuthenticationError()
    request.state.user_id = user_id
    return user_id


async def get_optional_user_id(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> Optional[int]:
    """Like get_current_user_id, but anonymous (or invalid) callers get None."""
    user_id = verify_token(_bearer_token(authorization))
    if user_id is not None:
        request.state.user_id = user_id
    return user_id


def _ensure_owner(current_user_id: int, owner_id: Optional[int], resource: str, resource_id: int) -> None:
    if owner_id is None:
        raise NotFoundError(resource=resource, resource_id=str(resource_id))
    if owner_id != current_user_id:
        logger.warning(
            "User %s denied access to %s %s owned by %s",
            current_user_id, resource, resource_id, owner_id,
        )
        raise ForbiddenError(resource=resource, resource_id=str(resource_id))


async def _owner_of(db: AsyncSession, column, key_column, key: int) -> Optional[int]:
    try:
        result = await db.execute(select(column).where(key_column == key))
        return result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error("Database error resolving owner: %s", str(e), exc_info=True)
        raise DatabaseError(context={"error_type": type(e).__name__})


async def require_profile_owner(
    user_id: int = Path(..., description="Target user id"),
    current_user_id: int = Depends(get_current_user_id),
) -> int:
    """
    The profile owner is the user in the path. Returns the user id.

    Existence is not checked here; the service answers 404 for unknown ids.
    """
    if user_id != current_user_id:
        logger.warning("User %s denied access to user %s", current_user_id, user_id)
        raise ForbiddenError(resource="user", resource_id=str(user_id))
    return user_id


async def require_stream_owner(
    stream_id: int = Path(..., description="Stream session id"),
    current_user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> int:
    """Returns the stream id once the caller is confirmed as its broadcaster."""
    owner_id = await _owner_of(db, Stream.user_id, Stream.id, stream_id)
    _ensure_owner(current_user_id, owner_id, "stream", stream_id)
    return stream_id


async def require_schedule_owner(
    schedule_id: int = Path(..., description="Schedule entry id"),
    current_user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> int:
    """Returns the schedule id once the caller is confirmed as its owner."""
    owner_id = await _owner_of(db, Schedule.user_id, Schedule.id, schedule_id)
    _ensure_owner(current_user_id, owner_id, "schedule", schedule_id)
    return schedule_id
