"""
ScorePress Backend — Shared Response Schemas
==============================================

What:  The error envelope used by every endpoint, and the health payload.
Why:   Clients parse one error structure no matter which endpoint failed.
       JSON endpoints and PDF endpoints alike return this shape on failure.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Invalid input: checkboxStates should be an array of length 8",
            "details": {"field": "checkboxStates", "expected_length": 8, "actual_length": 7},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    database: str = Field(description="Record store connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
