"""
==============================================================================
Authentication Endpoints
==============================================================================

    POST /auth/login            username + password  -> token pair
    POST /auth/refresh          refresh token        -> new token pair
    GET  /auth/me               current user and active shop
    PUT  /auth/change-password

==============================================================================
"""

from typing import Tuple

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.db.models import User
from app.core.dependencies import get_current_user
from app.services.auth_service import AuthService
from app.schemas.auth import (
    ChangePasswordRequest,
    CurrentUserInfo,
    CurrentUserResponse,
    LoginRequest,
    RefreshRequest,
    TokenResponse,
    UserInfo,
)
from app.schemas.common import MessageResponse


router = APIRouter(prefix="/auth", tags=["Authentication"])


class AuthController:
    """Turns AuthService results into API responses."""

    def __init__(self, db: Session):
        self._auth = AuthService(db)

    def _issued(self, result: Tuple[User, str, str]) -> TokenResponse:
        user, access_token, refresh_token = result
        return TokenResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self._auth.get_token_expiry_seconds(),
            user=UserInfo.model_validate(user)
        )

    def login(self, request: LoginRequest) -> TokenResponse:
        return self._issued(self._auth.authenticate(request.username, request.password))

    def refresh(self, request: RefreshRequest) -> TokenResponse:
        return self._issued(self._auth.refresh_tokens(request.refresh_token))

    def change_password(self, user: User, request: ChangePasswordRequest) -> MessageResponse:
        self._auth.change_password(user, request.current_password, request.new_password)
        return MessageResponse(message="Password changed successfully")


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, db: Session = Depends(get_db)):
    return AuthController(db).login(request)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(request: RefreshRequest, db: Session = Depends(get_db)):
    """Both tokens are replaced; the old refresh token stays valid until it expires."""
    return AuthController(db).refresh(request)


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user_info(user: User = Depends(get_current_user)):
    return CurrentUserResponse(user=CurrentUserInfo.model_validate(user))


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    request: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return AuthController(db).change_password(user, request)
