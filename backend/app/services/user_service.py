"""
Sparkz Backend: User Service (Profiles, Stream Keys, Follow Graph)
===================================================================

What:  Everything keyed by a user id: profile read/update, profile picture,
       ingest key read/rotation, follow edges and follower listing.
How:   One or two statements per operation, plus a Mux call for key rotation.
Who:   Called by the /users route handlers. Ownership has already been
       checked by the route dependencies when a method here mutates a user.

Key rotation:
    Mux resets the key first; the new key is then written to the row in the
    same request. A Mux failure leaves the stored key untouched (502).
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, NotFoundError, UpstreamServiceError
from app.models.follow import Follow
from app.models.user import User
from app.schemas.user import (
    FollowerItem,
    ProfileUpdateResponse,
    StreamKeyResponse,
    UserProfile,
)
from app.services.image_service import image_service
from app.services.mux_client import mux_client

logger = logging.getLogger(__name__)


class UserService:
    """Business logic for user-scoped operations."""

    async def get_user(self, db: AsyncSession, user_id: int) -> User:
        """
        Loads a user row or raises NotFoundError.

        Raises:
            NotFoundError: no user with that id (→ 404)
            DatabaseError: query failed (→ 500)
        """
        try:
            user = await db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(context={"user_id": user_id})

        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def get_profile(
        self,
        db: AsyncSession,
        user_id: int,
        viewer_id: Optional[int] = None,
    ) -> UserProfile:
        """
        Public profile, plus email and stream credentials when the viewer is
        the profile owner.
        """
        user = await self.get_user(db, user_id)
        profile = UserProfile(
            id=user.id,
            dj_name=user.dj_name,
            bio=user.bio,
            profile_pic=user.profile_pic,
            playback_id=user.playback_id,
        )
        if viewer_id is not None and viewer_id == user.id:
            profile.email = user.email
            profile.stream_key = user.stream_key
            profile.mux_stream_id = user.mux_stream_id
        return profile

    async def update_profile(
        self,
        db: AsyncSession,
        user_id: int,
        dj_name: str,
        bio: Optional[str],
    ) -> ProfileUpdateResponse:
        user = await self.get_user(db, user_id)
        user.dj_name = dj_name
        user.bio = bio
        await self._flush(db, "update profile", user_id)
        logger.info("User %s updated their profile", user_id)
        return ProfileUpdateResponse.model_validate(user)

    async def update_profile_pic(
        self,
        db: AsyncSession,
        user_id: int,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> None:
        """
        Crops the upload to a square thumbnail and stores it as a data URL.

        Raises:
            PayloadTooLargeError: upload above MAX_UPLOAD_SIZE (→ 413)
            ValidationError: empty or undecodable upload (→ 400)
        """
        user = await self.get_user(db, user_id)
        user.profile_pic = await image_service.process_upload(content, content_length)
        await self._flush(db, "update profile picture", user_id)

    async def get_stream_key(self, db: AsyncSession, user_id: int) -> StreamKeyResponse:
        user = await self.get_user(db, user_id)
        return StreamKeyResponse(stream_key=user.stream_key)

    async def regenerate_stream_key(self, db: AsyncSession, user_id: int) -> StreamKeyResponse:
        """
        Rotates the ingest key at Mux and stores the new one.

        Raises:
            NotFoundError: unknown user
            UpstreamServiceError: user has no live stream, or Mux refused (→ 502)
        """
        user = await self.get_user(db, user_id)
        if not user.mux_stream_id:
            raise UpstreamServiceError(
                message="Failed to reset stream key",
                operation="reset_stream_key",
                context={"user_id": user_id, "reason": "no live stream on record"},
            )

        new_key = await mux_client.reset_stream_key(user.mux_stream_id)
        user.stream_key = new_key
        await self._flush(db, "store regenerated stream key", user_id)
        logger.info("Stream key rotated for user %s", user_id)
        return StreamKeyResponse(stream_key=new_key)

    async def follow(self, db: AsyncSession, follower_id: int, following_id: int) -> None:
        """
        Records follower → following. Following twice leaves a single edge.

        Raises:
            NotFoundError: the followed user does not exist
        """
        await self.get_user(db, following_id)

        dialect = db.bind.dialect.name if db.bind is not None else "postgresql"
        insert = sqlite.insert if dialect == "sqlite" else postgresql.insert
        stmt = (
            insert(Follow)
            .values(follower_id=follower_id, following_id=following_id)
            .on_conflict_do_nothing(index_elements=["follower_id", "following_id"])
        )
        try:
            await db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(
                "Database error following %s -> %s: %s",
                follower_id, following_id, str(e), exc_info=True,
            )
            raise DatabaseError(context={"error_type": type(e).__name__})

    async def list_followers(self, db: AsyncSession, user_id: int) -> List[FollowerItem]:
        """Users following ``user_id``. Empty for unknown ids."""
        query = (
            select(User.id, User.dj_name, User.profile_pic)
            .join(Follow, Follow.follower_id == User.id)
            .where(Follow.following_id == user_id)
            .order_by(Follow.created_at, User.id)
        )
        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error listing followers of %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(context={"user_id": user_id})

        return [
            FollowerItem(id=row.id, dj_name=row.dj_name, profile_pic=row.profile_pic)
            for row in result
        ]

    @staticmethod
    async def _flush(db: AsyncSession, action: str, user_id: int) -> None:
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error (%s) for user %s: %s", action, user_id, str(e), exc_info=True)
            raise DatabaseError(context={"user_id": user_id, "action": action})


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
