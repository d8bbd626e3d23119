"""
Sparkz Backend: Stream Session Model
=====================================

A stream session is one broadcast by a user. It is distinct from the user's
permanent Mux live stream: `is_live` is a local flag, flipped on at creation
and off by an explicit end. Nothing syncs it with what Mux reports.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Stream(Base):
    __tablename__ = "sparkz_streams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("sparkz_users.id"),
        nullable=False,
        index=True,
    )
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    genre: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    is_live: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # GET /streams/active filters on is_live and sorts newest first
    __table_args__ = (
        Index("idx_sparkz_streams_live_created", "is_live", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Stream(id={self.id}, user_id={self.user_id}, is_live={self.is_live})>"
