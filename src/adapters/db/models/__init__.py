from src.adapters.db.models.user import UserModel
from src.adapters.db.models.user_session import UserSessionModel
from src.adapters.db.models.email_verification import EmailVerificationModel
from src.adapters.db.models.account_deletion import AccountDeletionModel

__all__ = [
    "UserModel",
    "UserSessionModel",
    "EmailVerificationModel",
    "AccountDeletionModel",
]
