"""
Email Builder Backend — Shared Response Schemas
================================================

Error and health payloads used across routers.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Error body returned by every failing endpoint.

    Example:
        {"error": "Template not found.", "request_id": "a1b2c3d4"}
    """
    error: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and container probes."""
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    database: str = Field(description="Template store: connected, disconnected")
    media: str = Field(description="Media host credentials: configured, unconfigured")
    uptime_seconds: float = Field(description="Seconds since service started")
