"""
Sparkz Backend: User Route Handlers
====================================

What:  Profiles, profile pictures, stream keys, follow graph and schedules,
       all addressed by /users/{user_id}.
Who:   Called by the web client's profile, dashboard and broadcaster pages.

Access:
    GET  /users/{id}                  optional token (owner sees private fields)
    PUT  /users/{id}                  owner
    POST /users/{id}/profile-pic      owner
    GET  /users/{id}/stream-key       owner
    POST /users/{id}/regenerate-key   owner
    POST /users/{id}/follow           any authenticated user (acts as caller)
    GET  /users/{id}/followers        public
    GET  /users/{id}/schedule         public
    POST /users/{id}/schedule         owner
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException

from app.config import settings
from app.database import get_db_session
from app.dependencies import get_current_user_id, get_optional_user_id, require_profile_owner
from app.exceptions import ValidationError
from app.schemas.common import ErrorResponse, SuccessResponse
from app.schemas.schedule import CreateScheduleRequest, ScheduleItem
from app.schemas.user import (
    FollowerItem,
    ProfileUpdateResponse,
    StreamKeyResponse,
    UpdateProfileRequest,
    UserProfile,
)
from app.services.schedule_service import schedule_service
from app.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{settings.api_prefix}/users", tags=["Users"])

OWNER_ERRORS = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Caller is not the profile owner", "model": ErrorResponse},
    404: {"description": "User not found", "model": ErrorResponse},
}

PROFILE_PIC_BODY = {
    "requestBody": {
        "required": True,
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "properties": {"profilePic": {"type": "string", "format": "binary"}},
                    "required": ["profilePic"],
                }
            }
        },
    }
}


@router.get(
    "/{user_id}",
    response_model=UserProfile,
    response_model_exclude_unset=True,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get a user profile",
    description=(
        "Public profile. When the request carries the owner's token the response "
        "also includes email, stream_key and mux_stream_id."
    ),
)
async def get_user(
    user_id: int,
    viewer_id: Optional[int] = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> UserProfile:
    return await user_service.get_profile(db=db, user_id=user_id, viewer_id=viewer_id)


@router.put(
    "/{user_id}",
    response_model=ProfileUpdateResponse,
    responses=OWNER_ERRORS,
    summary="Update DJ name and bio",
)
async def update_user(
    body: UpdateProfileRequest,
    user_id: int = Depends(require_profile_owner),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileUpdateResponse:
    return await user_service.update_profile(
        db=db, user_id=user_id, dj_name=body.dj_name, bio=body.bio
    )


@router.post(
    "/{user_id}/profile-pic",
    response_model=SuccessResponse,
    responses={
        **OWNER_ERRORS,
        400: {"description": "Missing or undecodable image", "model": ErrorResponse},
        413: {"description": "Image above the upload limit", "model": ErrorResponse},
    },
    summary="Upload a profile picture",
    description=(
        "Multipart field `profilePic`. The image is cropped to a square, resized and "
        "stored inline as a JPEG data URL."
    ),
    openapi_extra=PROFILE_PIC_BODY,
)
async def upload_profile_pic(
    request: Request,
    user_id: int = Depends(require_profile_owner),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    # Parsed by hand: the owner check must run before any upload byte is read
    try:
        async with request.form() as form:
            profile_pic = form.get("profilePic")
            if not isinstance(profile_pic, UploadFile):
                raise ValidationError(message="No file uploaded", field="profilePic")

            # Read at most one byte past the cap; enough to detect an oversized upload
            content = await profile_pic.read(settings.max_upload_size + 1)
            content_length = profile_pic.size
    except HTTPException as e:
        logger.warning("Malformed multipart body for user %s: %s", user_id, e.detail)
        raise ValidationError(message="Malformed multipart body", field="profilePic")

    await user_service.update_profile_pic(
        db=db,
        user_id=user_id,
        content=content,
        content_length=content_length,
    )
    return SuccessResponse()


@router.get(
    "/{user_id}/stream-key",
    response_model=StreamKeyResponse,
    responses=OWNER_ERRORS,
    summary="Get the RTMP ingest key",
)
async def get_stream_key(
    user_id: int = Depends(require_profile_owner),
    db: AsyncSession = Depends(get_db_session),
) -> StreamKeyResponse:
    return await user_service.get_stream_key(db=db, user_id=user_id)


@router.post(
    "/{user_id}/regenerate-key",
    response_model=StreamKeyResponse,
    responses={
        **OWNER_ERRORS,
        502: {"description": "Mux could not reset the key", "model": ErrorResponse},
    },
    summary="Rotate the RTMP ingest key",
)
async def regenerate_stream_key(
    user_id: int = Depends(require_profile_owner),
    db: AsyncSession = Depends(get_db_session),
) -> StreamKeyResponse:
    return await user_service.regenerate_stream_key(db=db, user_id=user_id)


@router.post(
    "/{user_id}/follow",
    response_model=SuccessResponse,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Follow a user",
    description="Idempotent: following the same user again keeps a single edge.",
)
async def follow_user(
    user_id: int,
    current_user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await user_service.follow(db=db, follower_id=current_user_id, following_id=user_id)
    return SuccessResponse()


@router.get(
    "/{user_id}/followers",
    response_model=List[FollowerItem],
    summary="List followers",
)
async def list_followers(
    user_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> List[FollowerItem]:
    return await user_service.list_followers(db=db, user_id=user_id)


@router.get(
    "/{user_id}/schedule",
    response_model=List[ScheduleItem],
    summary="List a DJ's show schedule",
)
async def list_schedule(
    user_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> List[ScheduleItem]:
    return await schedule_service.list_schedule(db=db, user_id=user_id)


@router.post(
    "/{user_id}/schedule",
    response_model=ScheduleItem,
    responses=OWNER_ERRORS,
    summary="Add a show to the schedule",
)
async def add_schedule(
    body: CreateScheduleRequest,
    user_id: int = Depends(require_profile_owner),
    db: AsyncSession = Depends(get_db_session),
) -> ScheduleItem:
    # The owner is authenticated, so the row exists; no separate 404 check
    return await schedule_service.add_entry(
        db=db,
        user_id=user_id,
        day=body.day,
        time=body.time,
        show_name=body.show_name,
    )
