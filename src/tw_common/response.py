"""Unified API response wrapper.

All HTTP endpoints return this format:
{
    "code": 0,           // 0=success, non-0=AppError code
    "message": "success",
    "data": { ... },     // null on error
    "timestamp": "...",
    "request_id": "..."
}
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi import Request
from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")


def success_response(data: Any = None, message: str = "success") -> ApiResponse:
    return ApiResponse(code=0, message=message, data=data)


def error_response(code: int, message: str) -> ApiResponse:
    return ApiResponse(code=code, message=message, data=None)


def respond(request: Request, data: BaseModel | list[BaseModel] | None, message: str = "success") -> ApiResponse:
    """Wrap a schema (or list of schemas) and stamp the middleware request_id.

    Decimal fields are dumped in JSON mode so money always leaves as "123.45".
    """
    if isinstance(data, list):
        payload: Any = [item.model_dump(mode="json") for item in data]
    elif data is None:
        payload = None
    else:
        payload = data.model_dump(mode="json")
    resp = success_response(payload, message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
