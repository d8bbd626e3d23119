"""
Sparkz Backend: User Schemas
=============================

Profile, stream key and follower payloads.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserProfile(BaseModel):
    """
    GET /users/{id} response.

    email, stream_key and mux_stream_id are only populated for the profile
    owner; the route drops unset fields so other callers never see the keys.
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    dj_name: Optional[str] = None
    bio: Optional[str] = None
    profile_pic: Optional[str] = None
    playback_id: Optional[str] = None

    email: Optional[str] = None
    stream_key: Optional[str] = None
    mux_stream_id: Optional[str] = None


class UpdateProfileRequest(BaseModel):
    """PUT /users/{id} body."""
    model_config = ConfigDict(populate_by_name=True)

    dj_name: str = Field(alias="djName", min_length=1, max_length=255)
    bio: Optional[str] = Field(default=None, max_length=5000)


class ProfileUpdateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    dj_name: Optional[str] = None
    bio: Optional[str] = None


class StreamKeyResponse(BaseModel):
    """
    GET /users/{id}/stream-key and POST /users/{id}/regenerate-key.

    Serialized as {"streamKey": ...}; FastAPI renders response models by alias.
    """
    model_config = ConfigDict(populate_by_name=True)

    stream_key: Optional[str] = Field(default=None, alias="streamKey")


class FollowerItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    dj_name: Optional[str] = None
    profile_pic: Optional[str] = None
