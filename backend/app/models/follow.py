"""
Sparkz Backend: Follow Edge Model
==================================

Directed edge follower → followee. The (follower_id, following_id) pair is the
primary key, so a duplicate follow is absorbed by a conflict-ignoring insert.
There is no unfollow path.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Follow(Base):
    __tablename__ = "sparkz_follows"

    follower_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("sparkz_users.id"),
        primary_key=True,
    )
    following_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("sparkz_users.id"),
        primary_key=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<Follow({self.follower_id} -> {self.following_id})>"
