"""
Sparkz Backend: Stream & Chat Route Handlers
=============================================

What:  Stream session lifecycle and the per-session chat log.

Access:
    POST /streams               authenticated (session owned by the caller)
    GET  /streams/active        public
    POST /streams/{id}/end      session owner
    GET  /streams/{id}/chat     public
    POST /streams/{id}/chat     authenticated (posts as the caller)
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.dependencies import get_current_user_id, require_stream_owner
from app.schemas.common import ErrorResponse, SuccessResponse
from app.schemas.stream import (
    ActiveStreamItem,
    ChatMessageCreated,
    ChatMessageItem,
    ChatMessageRequest,
    CreateStreamRequest,
    StreamCreatedResponse,
)
from app.services.chat_service import chat_service
from app.services.stream_service import stream_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{settings.api_prefix}/streams", tags=["Streams"])


@router.post(
    "",
    response_model=StreamCreatedResponse,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Start a stream session",
)
async def create_stream(
    body: CreateStreamRequest,
    current_user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> StreamCreatedResponse:
    return await stream_service.create_stream(
        db=db, user_id=current_user_id, name=body.name, genre=body.genre
    )


# Declared before /{stream_id}/... so "active" is never parsed as an id
@router.get(
    "/active",
    response_model=List[ActiveStreamItem],
    summary="List live stream sessions",
    description="Sessions still marked live, newest first, with the broadcaster's public profile.",
)
async def list_active_streams(
    db: AsyncSession = Depends(get_db_session),
) -> List[ActiveStreamItem]:
    return await stream_service.list_active(db=db)


@router.post(
    "/{stream_id}/end",
    response_model=SuccessResponse,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "Caller does not own the session", "model": ErrorResponse},
        404: {"description": "Stream not found", "model": ErrorResponse},
    },
    summary="End a stream session",
)
async def end_stream(
    stream_id: int = Depends(require_stream_owner),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await stream_service.end_stream(db=db, stream_id=stream_id)
    return SuccessResponse()


@router.get(
    "/{stream_id}/chat",
    response_model=List[ChatMessageItem],
    summary="Read the chat log",
    description="The first 100 messages of the session in posting order.",
)
async def list_chat(
    stream_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> List[ChatMessageItem]:
    return await chat_service.list_messages(db=db, stream_id=stream_id)


@router.post(
    "/{stream_id}/chat",
    response_model=ChatMessageCreated,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Stream not found", "model": ErrorResponse},
    },
    summary="Post a chat message",
)
async def post_chat(
    stream_id: int,
    body: ChatMessageRequest,
    current_user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ChatMessageCreated:
    return await chat_service.post_message(
        db=db, stream_id=stream_id, user_id=current_user_id, message=body.message
    )
