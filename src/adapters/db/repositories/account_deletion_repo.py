from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy import select, update

from src.adapters.db.models.account_deletion import AccountDeletionModel
from src.adapters.db.models.user import UserModel
from src.adapters.db.repositories.base_repository import BaseRepository
from src.adapters.db.repositories.user_repo import UserRepository
from src.data.enums.deletion_status import DeletionStatus


class AccountDeletionRepository(BaseRepository[AccountDeletionModel]):
    def __init__(self, db: Session):
        super().__init__(db, AccountDeletionModel)

    def schedule(
        self,
        user_id: int,
        requested_at: datetime,
        scheduled_deletion_at: datetime,
    ) -> AccountDeletionModel:
        """Cancel the user's pending requests and insert a fresh pending one in one commit"""
        self.db.execute(
            update(AccountDeletionModel)
            .where(AccountDeletionModel.user_id == user_id)
            .where(AccountDeletionModel.status == DeletionStatus.PENDING)
            .values(status=DeletionStatus.CANCELLED)
        )
        return self.create(
            user_id=user_id,
            requested_at=requested_at,
            scheduled_deletion_at=scheduled_deletion_at,
            status=DeletionStatus.PENDING,
        )

    def get_pending_for_user(self, user_id: int) -> AccountDeletionModel | None:
        stmt = (
            select(AccountDeletionModel)
            .where(AccountDeletionModel.user_id == user_id)
            .where(AccountDeletionModel.status == DeletionStatus.PENDING)
            .order_by(AccountDeletionModel.id.desc())
            .limit(1)
        )
        return self.db.scalar(stmt)

    def list_for_user(self, user_id: int) -> list[AccountDeletionModel]:
        stmt = (
            select(AccountDeletionModel)
            .where(AccountDeletionModel.user_id == user_id)
            .order_by(AccountDeletionModel.id)
        )
        return list(self.db.scalars(stmt).all())

    def get_due(self, now: datetime, limit: int = 200) -> list[AccountDeletionModel]:
        stmt = (
            select(AccountDeletionModel)
            .where(AccountDeletionModel.status == DeletionStatus.PENDING)
            .where(AccountDeletionModel.scheduled_deletion_at <= now)
            .order_by(AccountDeletionModel.scheduled_deletion_at)
            .limit(limit)
        )
        return list(self.db.scalars(stmt).all())

    def set_status(self, deletion: AccountDeletionModel, status: DeletionStatus) -> AccountDeletionModel:
        deletion.status = status
        return self.save(deletion)

    def complete(self, deletion: AccountDeletionModel, user: UserModel | None) -> AccountDeletionModel:
        """Mark the request completed and remove its user in a single commit"""
        deletion.status = DeletionStatus.COMPLETED
        if user is not None:
            UserRepository(self.db).delete_user(user, commit=False)
        self.db.commit()
        self.db.refresh(deletion)
        return deletion
