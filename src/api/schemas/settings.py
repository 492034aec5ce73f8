from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, StrictBool


class ApiResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    data: Optional[dict[str, Any]] = None
    errors: Optional[dict[str, list[str]]] = None


class UpdateNameRequest(BaseModel):
    name: str


class EmailChangeRequest(BaseModel):
    email: str = Field(..., max_length=255)
    current_password: str = Field(..., min_length=1)


class VerifyEmailChangeRequest(BaseModel):
    token: str = Field(..., min_length=1)


class UpdatePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    password: str
    password_confirmation: str


class DeleteAccountRequest(BaseModel):
    password: str = Field(..., min_length=1)
    confirmation: StrictBool


class DeletionStatusData(BaseModel):
    has_pending_deletion: bool
    requested_at: Optional[datetime] = None
    scheduled_deletion_at: Optional[datetime] = None
    days_remaining: Optional[int] = None
