from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional

from src.adapters.db.base import SessionLocal
from src.core.security import decode_access_token, hash_token
from src.adapters.db.repositories.user_repo import UserRepository
from src.adapters.db.repositories.user_session_repo import UserSessionRepository
from src.adapters.db.models.user import UserModel
from src.services.internal.email import Mailer


# HTTP Bearer token scheme (auto_error=False to allow cookie fallback)
security = HTTPBearer(auto_error=False)


def get_db():
    """Database session dependency"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_mailer() -> Mailer:
    return Mailer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_access_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    Extract access token from Bearer header or cookie

    Priority: Bearer header > Cookie
    """
    if credentials:
        return credentials.credentials

    token = request.cookies.get("access_token")
    if token:
        return token

    raise _unauthorized("Not authenticated")


def get_current_user(
    token: str = Depends(get_access_token),
    db: Session = Depends(get_db),
) -> UserModel:
    """
    Resolve the authenticated user for this request.

    The JWT must decode as an access token and its session row must still be
    active, so tokens ended by logout or logout-all stop working at once.
    Route handlers receive the user explicitly and hand it to the services.
    """
    payload = decode_access_token(token)
    if payload is None:
        raise _unauthorized("Could not validate credentials")

    # Check token type (must be access, not refresh)
    if payload.get("type") != "access":
        raise _unauthorized("Invalid token type")

    session = UserSessionRepository(db).get_active_session_by_token_hash(hash_token(token))
    if not session:
        raise _unauthorized("Session expired or invalidated")

    user_id = payload.get("sub")
    if user_id is None:
        raise _unauthorized("Could not validate credentials")

    user = UserRepository(db).get_user_by_id(int(user_id))
    if user is None or user.id != session.user_id:
        raise _unauthorized("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive",
        )

    return user
