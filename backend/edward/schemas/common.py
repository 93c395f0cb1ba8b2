"""
Edward Backend — Shared Response Schemas
==========================================

What:  Error, acknowledgement and health payloads shared by every router.
Why:   Clients parse one error shape regardless of which endpoint failed.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "invalid_order",
            "message": "Cannot rearrange chapters: an invalid chapter array was received.",
            "details": null,
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(BaseModel):
    """Acknowledgement returned by write endpoints."""
    message: str = Field(description="Human-readable result of the operation")
    id: Optional[str] = Field(default=None, description="Guid of the affected item")
    outcome: Optional[str] = Field(
        default=None,
        description="inserted, updated or unchanged for upserts",
    )


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
