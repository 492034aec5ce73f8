from datetime import datetime, timedelta
from sqlalchemy.orm import Session

from src.adapters.db.models.account_deletion import AccountDeletionModel
from src.adapters.db.models.user import UserModel
from src.adapters.db.repositories.account_deletion_repo import AccountDeletionRepository
from src.adapters.db.repositories.user_repo import UserRepository
from src.core.config import settings
from src.core.exceptions import NotFound, ValidationFailure
from src.core.security import verify_password
from src.data.enums.deletion_status import DeletionStatus
from src.services.internal.email import Mailer
from src.util.logger import logger
from src.util.time import utcnow


class AccountDeletionService:
    def __init__(self, db: Session, mailer: Mailer | None = None):
        self.db = db
        self.user_repo = UserRepository(db)
        self.deletion_repo = AccountDeletionRepository(db)
        self.mailer = mailer or Mailer()
        self.grace_period = timedelta(days=settings.account_deletion_grace_days)

    def request_deletion(
        self,
        user: UserModel,
        password: str,
        confirmation: bool,
        now: datetime | None = None,
    ) -> AccountDeletionModel:
        """Schedule the account for deletion after the grace period, replacing any pending request"""
        errors: dict[str, list[str]] = {}
        if not verify_password(password, user.hashed_password):
            errors["password"] = ["The provided password is incorrect."]
        if confirmation is not True:
            errors["confirmation"] = ["You must confirm that you want to delete your account."]
        if errors:
            raise ValidationFailure(errors)

        now = now or utcnow()
        deletion = self.deletion_repo.schedule(
            user_id=user.id,
            requested_at=now,
            scheduled_deletion_at=now + self.grace_period,
        )
        logger.info("Account deletion scheduled for user %s", user.id)

        self.mailer.send_deletion_requested(
            user.email,
            deletion.scheduled_deletion_at,
            deletion.days_remaining(now),
        )
        return deletion

    def cancel(self, user: UserModel) -> AccountDeletionModel:
        deletion = self.deletion_repo.get_pending_for_user(user.id)
        if not deletion:
            raise NotFound("No pending deletion request found.")

        deletion = self.deletion_repo.set_status(deletion, DeletionStatus.CANCELLED)
        logger.info("Account deletion cancelled for user %s", user.id)

        self.mailer.send_deletion_cancelled(user.email)
        return deletion

    def status(self, user: UserModel) -> AccountDeletionModel | None:
        return self.deletion_repo.get_pending_for_user(user.id)

    def process_due_deletions(self, now: datetime | None = None, limit: int | None = None) -> int:
        """
        Carry out every deletion whose grace period is over.

        The user row is removed and the request is kept, marked completed,
        as the record that the deletion happened. A row that fails is rolled
        back and stays pending for the next run.
        """
        now = now or utcnow()
        processed = 0
        for deletion in self.deletion_repo.get_due(now, limit or settings.sweep_batch_limit):
            if not deletion.is_due(now):
                continue
            deletion_id = deletion.id
            user_id = deletion.user_id
            try:
                user = self.user_repo.get_user_by_id(user_id) if user_id is not None else None
                self.deletion_repo.complete(deletion, user)
            except Exception:
                self.db.rollback()
                logger.exception("Account deletion %s failed for user %s", deletion_id, user_id)
                continue
            logger.info("Account deletion completed for user %s", user_id)
            processed += 1

        return processed
