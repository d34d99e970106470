"""
Common response DTOs shared across multiple endpoints.

ErrorResponse      error envelope produced by the exception handlers
MessageResponse    {status, message} success envelope used by most endpoints
HealthResponse     GET /health
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict


class ErrorResponse(BaseModel):
    """Standard error JSON body produced by AppError.to_dict()."""

    model_config = ConfigDict(populate_by_name=True)

    status: Literal["error"] = "error"
    message: str
    code: str
    field: Optional[str] = None
    details: Optional[Any] = None


class MessageResponse(BaseModel):
    """Generic success envelope returned by several endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    status: Literal["success"] = "success"
    message: str


class HealthResponse(BaseModel):
    """Response body for GET /health."""

    model_config = ConfigDict(populate_by_name=True)

    status: str
    checks: dict[str, str]
