from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy import delete, select, update

from src.adapters.db.models.account_deletion import AccountDeletionModel
from src.adapters.db.models.user import UserModel
from src.adapters.db.models.user_session import UserSessionModel
from src.adapters.db.models.email_verification import EmailVerificationModel
from src.adapters.db.repositories.base_repository import BaseRepository
from src.core.security import get_password_hash
from src.util.time import utcnow


class UserRepository(BaseRepository[UserModel]):
    def __init__(self, db: Session):
        super().__init__(db, UserModel)

    def create_user(self, email: str, name: str, password: str) -> UserModel:
        """Create a new user"""
        user = UserModel(
            email=email,
            name=name,
            hashed_password=get_password_hash(password),
        )

        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def get_user_by_id(self, user_id: int) -> Optional[UserModel]:
        """Get user by ID"""
        return self.db.get(UserModel, user_id)

    def get_user_by_email(self, email: str) -> Optional[UserModel]:
        """Get user by email"""
        stmt = select(UserModel).where(UserModel.email == email)
        return self.db.scalar(stmt)

    def email_taken_by_other(self, email: str, user_id: int) -> bool:
        stmt = select(UserModel.id).where(UserModel.email == email, UserModel.id != user_id)
        return self.db.scalar(stmt) is not None

    def update_user(self, user: UserModel, **kwargs) -> UserModel:
        """Update user fields"""
        for key, value in kwargs.items():
            if hasattr(user, key) and value is not None:
                setattr(user, key, value)

        user.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(user)
        return user

    def update_password(self, user: UserModel, new_password: str) -> UserModel:
        """Update user password"""
        user.hashed_password = get_password_hash(new_password)
        user.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(user)
        return user

    def update_last_login(self, user: UserModel) -> UserModel:
        """Update last login timestamp"""
        user.last_login = utcnow()
        self.db.commit()
        self.db.refresh(user)
        return user

    def delete_user(self, user: UserModel, commit: bool = True) -> None:
        """Delete a user together with rows that only make sense while it exists"""
        # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on
        self.db.execute(delete(UserSessionModel).where(UserSessionModel.user_id == user.id))
        self.db.execute(delete(EmailVerificationModel).where(EmailVerificationModel.user_id == user.id))
        self.db.execute(
            update(AccountDeletionModel)
            .where(AccountDeletionModel.user_id == user.id)
            .values(user_id=None)
        )
        self.db.delete(user)
        if commit:
            self.db.commit()
