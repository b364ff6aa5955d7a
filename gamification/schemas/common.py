"""Shared / generic schemas."""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error envelope returned by every failing endpoint."""

    success: bool = False
    error_code: str
    message: str
    details: dict[str, Any] | None = None


class AcceptedResponse(BaseModel):
    """Returned when work has been queued rather than performed."""

    success: bool = True
    message: str = "accepted"
    task_id: str | None = None
