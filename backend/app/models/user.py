"""
Sparkz Backend: User Model
===========================

What:  ORM model for the `sparkz_users` table.
Who:   Used by the auth, user and stream services.

Lifecycle:
    1. Created at signup, after Mux has provisioned a live stream
       (stream_key, mux_stream_id and playback_id are filled at insert)
    2. dj_name / bio / profile_pic mutated by the owner
    3. stream_key replaced on key regeneration
    4. Never deleted
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class User(Base):
    """A broadcaster/listener account."""

    __tablename__ = "sparkz_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Uniqueness is enforced by the store; signup also pre-checks it so a
    # known duplicate never reaches the provider.
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )

    # bcrypt hash (the column keeps its historical name)
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    dj_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # data:image/jpeg;base64,... (square thumbnail, stored inline)
    profile_pic: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ── Mux live stream ───────────────────────────────────────────────────
    stream_key: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    mux_stream_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    playback_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
