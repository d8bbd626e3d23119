"""
Sparkz Backend: Schedule Service
=================================

Recurring show slots per user. `day` and `time` are free text chosen by the
client; listing sorts them lexically (day, then time), not chronologically.
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, NotFoundError
from app.models.schedule import Schedule
from app.schemas.schedule import ScheduleItem

logger = logging.getLogger(__name__)


class ScheduleService:

    async def list_schedule(self, db: AsyncSession, user_id: int) -> List[ScheduleItem]:
        query = (
            select(Schedule)
            .where(Schedule.user_id == user_id)
            .order_by(Schedule.day, Schedule.time, Schedule.id)
        )
        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error listing schedule of user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(context={"user_id": user_id})

        return [ScheduleItem.model_validate(entry) for entry in result.scalars()]

    async def add_entry(
        self,
        db: AsyncSession,
        user_id: int,
        day: str,
        time: str,
        show_name: str,
    ) -> ScheduleItem:
        entry = Schedule(user_id=user_id, day=day, time=time, show_name=show_name)
        db.add(entry)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error adding schedule for user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(context={"user_id": user_id})
        return ScheduleItem.model_validate(entry)

    async def get_entry(self, db: AsyncSession, schedule_id: int) -> Schedule:
        try:
            entry = await db.get(Schedule, schedule_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching schedule %s: %s", schedule_id, str(e), exc_info=True)
            raise DatabaseError(context={"schedule_id": schedule_id})

        if entry is None:
            raise NotFoundError(resource="schedule", resource_id=str(schedule_id))
        return entry

    async def delete_entry(self, db: AsyncSession, schedule_id: int) -> None:
        entry = await self.get_entry(db, schedule_id)
        try:
            await db.delete(entry)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting schedule %s: %s", schedule_id, str(e), exc_info=True)
            raise DatabaseError(context={"schedule_id": schedule_id})
        logger.info("Schedule entry %s deleted", schedule_id)


# ── Singleton Instance ────────────────────────────────────────────────────
schedule_service = ScheduleService()
