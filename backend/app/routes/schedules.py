"""
Sparkz Backend: Schedule Route Handlers
========================================

Entries are created under /users/{id}/schedule; this router only deletes
them by their own id.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.dependencies import require_schedule_owner
from app.schemas.common import ErrorResponse, SuccessResponse
from app.services.schedule_service import schedule_service

router = APIRouter(prefix=f"{settings.api_prefix}/schedules", tags=["Schedules"])


@router.delete(
    "/{schedule_id}",
    response_model=SuccessResponse,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "Caller does not own the entry", "model": ErrorResponse},
        404: {"description": "Schedule entry not found", "model": ErrorResponse},
    },
    summary="Delete a schedule entry",
)
async def delete_schedule(
    schedule_id: int = Depends(require_schedule_owner),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await schedule_service.delete_entry(db=db, schedule_id=schedule_id)
    return SuccessResponse()
