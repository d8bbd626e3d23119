"""
Sparkz Backend: Chat Log Service
=================================

What:  Append-only chat per stream session.
How:   Reads return the earliest CHAT_HISTORY_LIMIT messages in posting order
       (created_at, then id), each joined with its author's public profile.
       Posting requires the session to exist.
Who:   Called by the /streams/{id}/chat route handlers.
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError
from app.models.chat import ChatMessage
from app.models.user import User
from app.schemas.stream import ChatMessageCreated, ChatMessageItem
from app.services.stream_service import stream_service

logger = logging.getLogger(__name__)

CHAT_HISTORY_LIMIT = 100


class ChatService:

    async def list_messages(self, db: AsyncSession, stream_id: int) -> List[ChatMessageItem]:
        """
        The first CHAT_HISTORY_LIMIT messages of a session, oldest first.

        Later messages are not returned; clients that need the tail of a long
        chat have no way to page to it. Unknown stream ids yield [].
        """
        query = (
            select(
                ChatMessage.id,
                ChatMessage.message,
                ChatMessage.created_at,
                User.id.label("user_id"),
                User.dj_name,
                User.profile_pic,
            )
            .join(User, ChatMessage.user_id == User.id)
            .where(ChatMessage.stream_id == stream_id)
            .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
            .limit(CHAT_HISTORY_LIMIT)
        )
        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error reading chat of stream %s: %s", stream_id, str(e), exc_info=True)
            raise DatabaseError(context={"stream_id": stream_id})

        return [ChatMessageItem.model_validate(dict(row._mapping)) for row in result]

    async def post_message(
        self,
        db: AsyncSession,
        stream_id: int,
        user_id: int,
        message: str,
    ) -> ChatMessageCreated:
        """
        Appends a message from ``user_id``.

        Raises:
            NotFoundError: the stream session does not exist (→ 404)
        """
        await stream_service.get_stream(db, stream_id)

        chat = ChatMessage(stream_id=stream_id, user_id=user_id, message=message)
        db.add(chat)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error posting chat to stream %s: %s", stream_id, str(e), exc_info=True)
            raise DatabaseError(context={"stream_id": stream_id})

        return ChatMessageCreated.model_validate(chat)


# ── Singleton Instance ────────────────────────────────────────────────────
chat_service = ChatService()
