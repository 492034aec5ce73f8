from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy import delete, select

from src.adapters.db.models.email_verification import EmailVerificationModel
from src.adapters.db.repositories.base_repository import BaseRepository


class EmailVerificationRepository(BaseRepository[EmailVerificationModel]):
    def __init__(self, db: Session):
        super().__init__(db, EmailVerificationModel)

    def replace_for_user(
        self,
        user_id: int,
        new_email: str,
        token_hash: str,
        expires_at: datetime,
    ) -> EmailVerificationModel:
        """Drop every earlier verification of the user and insert the new one in one commit"""
        self.db.execute(
            delete(EmailVerificationModel).where(EmailVerificationModel.user_id == user_id)
        )
        return self.create(
            user_id=user_id,
            new_email=new_email,
            token=token_hash,
            expires_at=expires_at,
        )

    def get_latest_for_user(self, user_id: int) -> EmailVerificationModel | None:
        stmt = (
            select(EmailVerificationModel)
            .where(EmailVerificationModel.user_id == user_id)
            .order_by(EmailVerificationModel.created_at.desc(), EmailVerificationModel.id.desc())
            .limit(1)
        )
        return self.db.scalar(stmt)

    def list_for_user(self, user_id: int) -> list[EmailVerificationModel]:
        stmt = select(EmailVerificationModel).where(EmailVerificationModel.user_id == user_id)
        return list(self.db.scalars(stmt).all())

    def delete_expired(self, now: datetime) -> int:
        result = self.db.execute(
            delete(EmailVerificationModel).where(EmailVerificationModel.expires_at < now)
        )
        self.db.commit()
        return result.rowcount
