from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from src.api.dependencies import get_db, get_current_user, get_access_token, get_mailer
from src.api.responses import ok
from src.api.schemas.auth import UserResponse
from src.api.schemas.settings import (
    ApiResponse,
    DeleteAccountRequest,
    DeletionStatusData,
    EmailChangeRequest,
    UpdateNameRequest,
    UpdatePasswordRequest,
    VerifyEmailChangeRequest,
)
from src.adapters.db.models.user import UserModel
from src.core.config import settings
from src.services.account_deletion_service import AccountDeletionService
from src.services.email_change_service import EmailChangeService
from src.services.internal.email import Mailer
from src.services.settings_service import SettingsService


router = APIRouter(prefix="/api/user", tags=["settings"])


def _user_data(user: UserModel) -> dict:
    return {"user": UserResponse.model_validate(user).model_dump(mode="json")}


@router.get("/profile", response_model=ApiResponse, response_model_exclude_none=True)
def get_profile(
    current_user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = SettingsService(db).get_profile(current_user)
    return ok(data=_user_data(user))


@router.put("/name", response_model=ApiResponse, response_model_exclude_none=True)
def update_name(
    body: UpdateNameRequest,
    current_user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = SettingsService(db).update_name(current_user, body.name)
    return ok("Name updated successfully.", _user_data(user))


# region email


@router.post("/email/request-change", response_model=ApiResponse, response_model_exclude_none=True)
def request_email_change(
    body: EmailChangeRequest,
    current_user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    """
    Send a verification code to the new address

    The code itself is only delivered by email.
    """
    service = EmailChangeService(db, mailer)
    _, verification = service.request_change(current_user, body.email, body.current_password)
    return ok(
        "Verification code sent to your new email address.",
        {
            "new_email": verification.new_email,
            "expires_in_minutes": settings.email_change_token_ttl_minutes,
        },
    )


@router.post("/email/verify", response_model=ApiResponse, response_model_exclude_none=True)
def verify_email_change(
    body: VerifyEmailChangeRequest,
    current_user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    user = EmailChangeService(db, mailer).verify(current_user, body.token)
    return ok("Email address updated successfully.", _user_data(user))


# endregion


@router.put("/password", response_model=ApiResponse, response_model_exclude_none=True)
def update_password(
    body: UpdatePasswordRequest,
    current_user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    SettingsService(db, mailer).update_password(
        current_user,
        current_password=body.current_password,
        password=body.password,
        password_confirmation=body.password_confirmation,
    )
    return ok("Password updated successfully.")


@router.post("/logout-all", response_model=ApiResponse, response_model_exclude_none=True)
def logout_all_devices(
    current_user: UserModel = Depends(get_current_user),
    access_token: str = Depends(get_access_token),
    db: Session = Depends(get_db),
):
    _, kept_current = SettingsService(db).logout_all_devices(current_user, access_token)
    if kept_current:
        return ok("Logged out from all other devices successfully.")
    return ok("Logged out from all devices successfully.")


# region account deletion


@router.post("/account/delete", response_model=ApiResponse, response_model_exclude_none=True)
def request_account_deletion(
    body: DeleteAccountRequest,
    current_user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    deletion = AccountDeletionService(db, mailer).request_deletion(
        current_user, body.password, body.confirmation
    )
    return ok(
        f"Account deletion requested. You have {settings.account_deletion_grace_days} days to cancel.",
        {
            "scheduled_deletion_at": deletion.scheduled_deletion_at,
            "days_remaining": deletion.days_remaining(),
        },
    )


@router.post("/account/cancel-deletion", response_model=ApiResponse, response_model_exclude_none=True)
def cancel_account_deletion(
    current_user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    AccountDeletionService(db, mailer).cancel(current_user)
    return ok("Account deletion cancelled successfully.")


@router.get("/account/deletion-status", response_model=ApiResponse, response_model_exclude_none=True)
def get_deletion_status(
    current_user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    deletion = AccountDeletionService(db).status(current_user)
    if not deletion:
        data = DeletionStatusData(has_pending_deletion=False)
    else:
        data = DeletionStatusData(
            has_pending_deletion=True,
            requested_at=deletion.requested_at,
            scheduled_deletion_at=deletion.scheduled_deletion_at,
            days_remaining=deletion.days_remaining(),
        )
    return ok(data=data.model_dump(mode="json", exclude_none=True))


# endregion
