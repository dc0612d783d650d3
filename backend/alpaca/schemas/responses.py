"""
Alpaca API — Pydantic Response Schemas
=======================================

What:  Response models that are not record documents themselves.
How:   Used as `response_model` / OpenAPI `responses` entries by the routes.

Record documents are serialized from their own shape (see alpaca.models).
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ServerInfo(BaseModel):
    """Returned by GET /api/version."""
    version: str = Field(description="API version string")
    name: str = Field(description="Server name")


# ══════════════════════════════════════════════════════════════════════════
# Error Response Models — Consistent error format across all endpoints
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error code (e.g., "validation_error", "not_found")
        message: Human-readable description
        details: Optional extra context (e.g., which field failed validation)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "error": "not_found",
            "message": "projects with ID '65a1f0c2e4b0a1b2c3d4e5f6' was not found",
            "details": null,
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
