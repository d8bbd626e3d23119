"""
Sparkz Backend: Schedule Schemas
=================================
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CreateScheduleRequest(BaseModel):
    """POST /users/{id}/schedule body."""
    model_config = ConfigDict(populate_by_name=True)

    day: str = Field(min_length=1, max_length=32)
    time: str = Field(min_length=1, max_length=32)
    show_name: str = Field(alias="showName", min_length=1, max_length=255)


class ScheduleItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    day: Optional[str] = None
    time: Optional[str] = None
    show_name: Optional[str] = None
