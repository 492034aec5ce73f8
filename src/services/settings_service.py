from sqlalchemy.orm import Session

from src.adapters.db.models.user import UserModel
from src.adapters.db.repositories.user_repo import UserRepository
from src.adapters.db.repositories.user_session_repo import UserSessionRepository
from src.core.exceptions import ValidationFailure
from src.core.security import hash_token, verify_password
from src.core.validators import check_password_strength, normalize_name
from src.services.internal.email import Mailer
from src.util.logger import logger


class SettingsService:
    """Profile, name, password and session housekeeping for the signed-in user"""

    def __init__(self, db: Session, mailer: Mailer | None = None):
        self.db = db
        self.user_repo = UserRepository(db)
        self.session_repo = UserSessionRepository(db)
        self.mailer = mailer or Mailer()

    def get_profile(self, user: UserModel) -> UserModel:
        return user

    def update_name(self, user: UserModel, name: str) -> UserModel:
        try:
            name = normalize_name(name)
        except ValueError as e:
            raise ValidationFailure.for_field("name", str(e))

        return self.user_repo.update_user(user, name=name)

    def update_password(
        self,
        user: UserModel,
        current_password: str,
        password: str,
        password_confirmation: str,
    ) -> UserModel:
        if not verify_password(current_password, user.hashed_password):
            raise ValidationFailure.for_field("current_password", "The current password is incorrect.")
        if password != password_confirmation:
            raise ValidationFailure.for_field("password", "Password confirmation does not match.")
        if password == current_password:
            raise ValidationFailure.for_field("password", "New password must be different from current password.")
        try:
            check_password_strength(password)
        except ValueError as e:
            raise ValidationFailure.for_field("password", str(e))

        user = self.user_repo.update_password(user, password)
        logger.info("Password changed for user %s", user.id)

        self.mailer.send_password_changed(user.email)
        return user

    def logout_all_devices(self, user: UserModel, access_token: str | None) -> tuple[int, bool]:
        """
        End every session of the user except the one making the request.

        Returns how many sessions were ended and whether the current one was
        kept. When the current session can't be identified, all are ended.
        """
        current = None
        if access_token:
            current = self.session_repo.get_active_session_by_token_hash(hash_token(access_token))
        if current is not None and current.user_id != user.id:
            current = None

        ended = self.session_repo.invalidate_all_user_sessions(
            user.id,
            keep_session_id=current.id if current else None,
        )
        logger.info("Ended %d sessions for user %s", ended, user.id)
        return ended, current is not None
