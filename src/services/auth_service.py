from datetime import timedelta
from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from src.adapters.db.repositories.user_repo import UserRepository
from src.adapters.db.repositories.user_session_repo import UserSessionRepository
from src.core.security import (
    verify_password,
    create_access_token,
    create_refresh_token,
    hash_token,
    decode_access_token,
    REFRESH_TOKEN_EXPIRE_DAYS,
)
from src.api.schemas.auth import UserCreate, UserLogin, Token, UserResponse
from src.util.logger import logger
from src.util.time import ensure_utc, utcnow


class AuthService:
    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)
        self.session_repo = UserSessionRepository(db)

    def register_user(self, user_data: UserCreate) -> UserResponse:
        """Register a new user"""
        if self.user_repo.get_user_by_email(user_data.email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered"
            )

        user = self.user_repo.create_user(
            email=user_data.email,
            name=user_data.name,
            password=user_data.password,
        )
        logger.info("Registered user %s", user.id)

        return UserResponse.model_validate(user)

    def login_user(self, login_data: UserLogin) -> Token:
        """Authenticate user and return JWT tokens"""
        user = self.user_repo.get_user_by_email(login_data.email)

        if not user or not verify_password(login_data.password, user.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect email or password",
                headers={"WWW-Authenticate": "Bearer"},
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="User account is inactive"
            )

        self.user_repo.update_last_login(user)

        token_data = {"sub": str(user.id)}
        access_token = create_access_token(data=token_data)
        refresh_token = create_refresh_token(data=token_data)

        # Create session in DB
        self.session_repo.create_session(
            user_id=user.id,
            token_hash=hash_token(access_token),
            refresh_token_hash=hash_token(refresh_token),
            expires_at=utcnow() + timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS),
        )

        return Token(access_token=access_token, refresh_token=refresh_token)

    def refresh_tokens(self, refresh_token: str) -> Token:
        """Refresh access token using refresh token"""
        payload = decode_access_token(refresh_token)
        if payload is None or payload.get("type") != "refresh":
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid refresh token",
            )

        session = self.session_repo.get_active_session_by_refresh_hash(hash_token(refresh_token))
        if not session:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Session not found or expired",
            )

        if ensure_utc(session.expires_at) < utcnow():
            self.session_repo.invalidate_session(session.id)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Session expired",
            )

        user = self.user_repo.get_user_by_id(session.user_id)
        if not user or not user.is_active:
            self.session_repo.invalidate_session(session.id)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User not found or inactive",
            )

        new_access_token = create_access_token(data={"sub": str(user.id)})
        self.session_repo.update_token_hash(session.id, hash_token(new_access_token))

        # Return same refresh token with new access token
        return Token(access_token=new_access_token, refresh_token=refresh_token)

    def logout(self, access_token: str) -> None:
        """Invalidate current session"""
        session = self.session_repo.get_active_session_by_token_hash(hash_token(access_token))

        if session:
            self.session_repo.invalidate_session(session.id)
