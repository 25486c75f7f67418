"""JSON envelope shared by every endpoint, success or failure.

    {"code": 0, "message": "success", "data": {...}, "errors": null,
     "timestamp": "2026-09-14T08:30:00+00:00", "request_id": "req_..."}

``code`` is 0 on success, otherwise one of the AppError codes. ``errors``
is only filled for request validation failures.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class FieldError(BaseModel):
    field: str
    message: str


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _fallback_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    errors: list[FieldError] | None = None
    timestamp: str = Field(default_factory=_now_iso)
    request_id: str = Field(default_factory=_fallback_request_id)


def success_response(data: Any = None, message: str = "success") -> ApiResponse:
    return ApiResponse(message=message, data=data)


def error_response(
    code: int, message: str, errors: list[FieldError] | None = None
) -> ApiResponse:
    return ApiResponse(code=code, message=message, errors=errors)
