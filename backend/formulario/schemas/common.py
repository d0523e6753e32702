"""
Formulario Backend — Shared Response Schemas
==============================================

What:  Error and health payloads shared by every router.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Fields:
        error: Human-readable message (localized), safe to show to users
        code: Machine-readable error code (e.g., "not_found")
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "error": "Fórmula no encontrada",
            "code": "not_found",
            "request_id": "1f0c2a9b"
        }
    """
    error: str = Field(description="Human-readable error description")
    code: str = Field(description="Machine-readable error code")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /api/health for monitoring and load balancer checks."""
    status: str = Field(description="Overall service status: ok, degraded")
    message: str = Field(description="Human-readable status line")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
