"""
Sparkz Backend: Shared Schemas
===============================

Error, acknowledgment and health payloads used across routers.
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field


class SuccessResponse(BaseModel):
    """Acknowledgment returned by writes that have no row to echo back."""
    success: bool = Field(default=True)


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Fields:
        error: Machine-readable code from a closed set (unauthenticated,
               forbidden, not_found, conflict, validation_error,
               payload_too_large, upstream_error, server_error,
               internal_server_error)
        message: Human-readable description, never raw exception text
        details: Extra context for client errors only
        request_id: Correlation ID for tracing this error in server logs
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Union[dict, list]] = Field(
        default=None, description="Additional error context; a list of {loc, msg} for 422"
    )
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Liveness probe payload."""
    status: str = Field(description="ok when the database answers, degraded otherwise")
    time: datetime = Field(description="Server time (UTC ISO 8601)")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
