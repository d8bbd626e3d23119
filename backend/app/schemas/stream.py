"""
Sparkz Backend: Stream & Chat Schemas
======================================
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CreateStreamRequest(BaseModel):
    """POST /streams body."""
    name: str = Field(min_length=1, max_length=255)
    genre: Optional[str] = Field(default=None, max_length=100)


class StreamCreatedResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: Optional[str] = None
    genre: Optional[str] = None
    created_at: datetime


class ActiveStreamItem(BaseModel):
    """A live stream session joined with its broadcaster's public profile."""
    id: int
    name: Optional[str] = None
    genre: Optional[str] = None
    created_at: datetime
    user_id: int
    dj_name: Optional[str] = None
    profile_pic: Optional[str] = None
    playback_id: Optional[str] = None


class ChatMessageRequest(BaseModel):
    """POST /streams/{id}/chat body."""
    message: str = Field(min_length=1, max_length=2000)


class ChatMessageCreated(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    message: str
    created_at: datetime


class ChatMessageItem(BaseModel):
    """A chat message joined with its author's public profile."""
    id: int
    message: str
    created_at: datetime
    user_id: int
    dj_name: Optional[str] = None
    profile_pic: Optional[str] = None
