from datetime import datetime, timedelta
from sqlalchemy.orm import Session

from src.adapters.db.models.email_verification import EmailVerificationModel
from src.adapters.db.models.user import UserModel
from src.adapters.db.repositories.email_verification_repo import EmailVerificationRepository
from src.adapters.db.repositories.user_repo import UserRepository
from src.core.config import settings
from src.core.exceptions import Expired, InvalidToken, NotFound, ValidationFailure
from src.core.security import (
    VERIFICATION_TOKEN_LENGTH,
    generate_verification_token,
    hash_token,
    tokens_match,
    verify_password,
)
from src.core.validators import normalize_email
from src.services.internal.email import Mailer
from src.util.logger import logger
from src.util.time import utcnow


class EmailChangeService:
    """
    Two-step email change: a request mails a one-time token to the new
    address, and verifying that token moves the account over.
    """

    def __init__(self, db: Session, mailer: Mailer | None = None):
        self.db = db
        self.user_repo = UserRepository(db)
        self.verification_repo = EmailVerificationRepository(db)
        self.mailer = mailer or Mailer()
        self.ttl = timedelta(minutes=settings.email_change_token_ttl_minutes)

    def request_change(
        self,
        user: UserModel,
        new_email: str,
        current_password: str,
        now: datetime | None = None,
    ) -> tuple[str, EmailVerificationModel]:
        """
        Start an email change for the user.

        Returns the plaintext token and the stored verification. Only the
        token hash is persisted; the plaintext goes out by email and must not
        be echoed back to the client.
        """
        errors: dict[str, list[str]] = {}
        if not verify_password(current_password, user.hashed_password):
            errors["current_password"] = ["The provided password is incorrect."]

        try:
            new_email = normalize_email(new_email)
        except ValueError as e:
            errors["email"] = [str(e)]
        else:
            if new_email == user.email.lower():
                errors["email"] = ["New email must be different from your current email."]
            elif self.user_repo.email_taken_by_other(new_email, user.id):
                errors["email"] = ["This email address is already in use."]

        if errors:
            raise ValidationFailure(errors)

        now = now or utcnow()
        plain_token = generate_verification_token()
        verification = self.verification_repo.replace_for_user(
            user_id=user.id,
            new_email=new_email,
            token_hash=hash_token(plain_token),
            expires_at=now + self.ttl,
        )
        logger.info("Email change requested for user %s", user.id)

        self.mailer.send_email_change_verification(new_email, plain_token, settings.email_change_token_ttl_minutes)
        self.mailer.send_email_change_alert(user.email, new_email)

        return plain_token, verification

    def verify(self, user: UserModel, token: str, now: datetime | None = None) -> UserModel:
        if len(token or "") != VERIFICATION_TOKEN_LENGTH:
            raise ValidationFailure.for_field("token", "Invalid verification token format.")

        verification = self.verification_repo.get_latest_for_user(user.id)
        if not verification:
            raise NotFound("No pending email verification found.")

        if verification.is_expired(now):
            self.verification_repo.delete_instance(verification)
            logger.info("Expired email verification discarded for user %s", user.id)
            raise Expired()

        if not tokens_match(token, verification.token):
            raise InvalidToken()

        if self.user_repo.email_taken_by_other(verification.new_email, user.id):
            self.verification_repo.delete_instance(verification)
            raise ValidationFailure.for_field("email", "This email address is already in use.")

        old_email = user.email
        user = self.user_repo.update_user(user, email=verification.new_email)
        self.verification_repo.delete_instance(verification)
        logger.info("Email changed for user %s", user.id)

        self.mailer.send_email_changed_notice(old_email, user.email)
        self.mailer.send_email_changed_confirmation(user.email)

        return user

    def cleanup_expired(self, now: datetime | None = None) -> int:
        removed = self.verification_repo.delete_expired(now or utcnow())
        if removed:
            logger.info("Removed %d expired email verifications", removed)
        return removed
