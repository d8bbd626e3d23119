"""
Sparkz Backend: Schedule Entry Model
=====================================

A recurring show slot announced by a user. `day` and `time` are free-form
strings chosen by the client (e.g. "Friday", "22:00"); there is no overlap or
uniqueness rule.
"""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Schedule(Base):
    __tablename__ = "sparkz_schedules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("sparkz_users.id"),
        nullable=False,
        index=True,
    )
    day: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    time: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    show_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Schedule(id={self.id}, user_id={self.user_id}, day='{self.day}')>"
