from fastapi import APIRouter, Depends, HTTPException, status, Response, Request
from sqlalchemy.orm import Session

from src.api.schemas.auth import (
    UserCreate,
    UserLogin,
    UserResponse,
    Token,
    RefreshTokenRequest,
)
from src.api.dependencies import get_db, get_current_user, get_access_token
from src.services.auth_service import AuthService
from src.adapters.db.models.user import UserModel
from src.core.security import ACCESS_TOKEN_EXPIRE_MINUTES, REFRESH_TOKEN_EXPIRE_DAYS
from src.core.config import settings


# Cookie settings
COOKIE_SECURE = not settings.debug
COOKIE_HTTPONLY = True
COOKIE_SAMESITE = "lax"


router = APIRouter(prefix="/auth", tags=["authentication"])


def _set_access_cookie(response: Response, access_token: str) -> None:
    response.set_cookie(
        key="access_token",
        value=access_token,
        httponly=COOKIE_HTTPONLY,
        secure=COOKIE_SECURE,
        samesite=COOKIE_SAMESITE,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.post(
    "/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED
)
def register(user_data: UserCreate, db: Session = Depends(get_db)):
    """
    Register a new user

    - **email**: Valid email address
    - **name**: Display name (2-50 letters, spaces, hyphens, apostrophes)
    - **password**: At least 8 characters with mixed case, a number and a symbol
    """
    auth_service = AuthService(db)
    return auth_service.register_user(user_data)


@router.post("/login", response_model=Token)
def login(login_data: UserLogin, response: Response, db: Session = Depends(get_db)):
    """
    Login and receive JWT tokens

    Returns JWT tokens and sets HttpOnly cookies
    """
    auth_service = AuthService(db)
    tokens = auth_service.login_user(login_data)

    _set_access_cookie(response, tokens.access_token)
    response.set_cookie(
        key="refresh_token",
        value=tokens.refresh_token,
        httponly=COOKIE_HTTPONLY,
        secure=COOKIE_SECURE,
        samesite=COOKIE_SAMESITE,
        max_age=REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
    )

    return tokens


@router.post("/refresh", response_model=Token)
def refresh_token(
    request: Request,
    response: Response,
    body: RefreshTokenRequest | None = None,
    db: Session = Depends(get_db),
):
    """
    Refresh access token using refresh token

    Accepts refresh token from the request body or the refresh_token cookie
    """
    refresh_tok = body.refresh_token if body else request.cookies.get("refresh_token")

    if not refresh_tok:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token required",
        )

    auth_service = AuthService(db)
    tokens = auth_service.refresh_tokens(refresh_tok)

    _set_access_cookie(response, tokens.access_token)

    return tokens


@router.post("/logout")
def logout(
    response: Response,
    db: Session = Depends(get_db),
    access_token: str = Depends(get_access_token),
):
    """
    Logout current session

    Invalidates the session and clears cookies
    """
    auth_service = AuthService(db)
    auth_service.logout(access_token)

    response.delete_cookie("access_token")
    response.delete_cookie("refresh_token")

    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: UserModel = Depends(get_current_user)):
    """
    Get current authenticated user information

    Requires: Authorization header with Bearer token
    """
    return UserResponse.model_validate(current_user)
