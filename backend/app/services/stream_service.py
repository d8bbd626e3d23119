"""
Sparkz Backend: Stream Session Service
=======================================

What:  Start a stream session, list live sessions, end a session.
How:   Local bookkeeping only. `is_live` is set on creation and cleared by an
       explicit end; no provider call is made here.
Who:   Called by the /streams route handlers.

Active listing query:
    SELECT s.id, s.name, s.genre, s.created_at,
           u.id AS user_id, u.dj_name, u.profile_pic, u.playback_id
    FROM sparkz_streams s JOIN sparkz_users u ON s.user_id = u.id
    WHERE s.is_live
    ORDER BY s.created_at DESC, s.id DESC
    → idx_sparkz_streams_live_created
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, NotFoundError
from app.models.stream import Stream
from app.models.user import User
from app.schemas.stream import ActiveStreamItem, StreamCreatedResponse

logger = logging.getLogger(__name__)


class StreamService:

    async def create_stream(
        self,
        db: AsyncSession,
        user_id: int,
        name: str,
        genre: Optional[str],
    ) -> StreamCreatedResponse:
        """Opens a live session owned by ``user_id``."""
        stream = Stream(user_id=user_id, name=name, genre=genre, is_live=True)
        db.add(stream)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating stream for user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(context={"user_id": user_id})

        logger.info("Stream %s started by user %s", stream.id, user_id)
        return StreamCreatedResponse.model_validate(stream)

    async def list_active(self, db: AsyncSession) -> List[ActiveStreamItem]:
        """Live sessions, newest first, each with its broadcaster's public profile."""
        query = (
            select(
                Stream.id,
                Stream.name,
                Stream.genre,
                Stream.created_at,
                User.id.label("user_id"),
                User.dj_name,
                User.profile_pic,
                User.playback_id,
            )
            .join(User, Stream.user_id == User.id)
            .where(Stream.is_live.is_(True))
            .order_by(Stream.created_at.desc(), Stream.id.desc())
        )
        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error listing active streams: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        return [ActiveStreamItem.model_validate(dict(row._mapping)) for row in result]

    async def get_stream(self, db: AsyncSession, stream_id: int) -> Stream:
        try:
            stream = await db.get(Stream, stream_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching stream %s: %s", stream_id, str(e), exc_info=True)
            raise DatabaseError(context={"stream_id": stream_id})

        if stream is None:
            raise NotFoundError(resource="stream", resource_id=str(stream_id))
        return stream

    async def end_stream(self, db: AsyncSession, stream_id: int) -> None:
        """Marks the session as no longer live. Ending twice is harmless."""
        stream = await self.get_stream(db, stream_id)
        stream.is_live = False
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error ending stream %s: %s", stream_id, str(e), exc_info=True)
            raise DatabaseError(context={"stream_id": stream_id})
        logger.info("Stream %s ended", stream_id)


# ── Singleton Instance ────────────────────────────────────────────────────
stream_service = StreamService()
