"""
Response envelope shared by the settings endpoints and the error handlers.

    {"success": bool, "message": str?, "data": {...}?, "errors": {field: [msg]}?}

Absent keys are omitted rather than sent as null.
"""
from typing import Any, Optional

from fastapi import status
from fastapi.responses import JSONResponse

from src.api.schemas.settings import ApiResponse


def build_payload(
    *,
    success: bool,
    message: Optional[str] = None,
    data: Optional[dict[str, Any]] = None,
    errors: Optional[dict[str, list[str]]] = None,
) -> dict[str, Any]:
    envelope = ApiResponse(success=success, message=message, data=data, errors=errors)
    return envelope.model_dump(mode="json", exclude_none=True)


def ok(message: Optional[str] = None, data: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    return build_payload(success=True, message=message, data=data)


def fail(
    message: str,
    http_status: int = status.HTTP_400_BAD_REQUEST,
    errors: Optional[dict[str, list[str]]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=http_status,
        content=build_payload(success=False, message=message, errors=errors),
    )
