"""
==============================================================================
Authentication Schemas Module
==============================================================================

Login, refresh and password change payloads. Every user payload carries
the caller's active shop (``shop_id``), the shop publish permissions are
checked in.

==============================================================================
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from app.db.models import UserRole


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str) -> str:
        return v.lower().strip()


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    # bcrypt ignores anything past 72 bytes
    new_password: str = Field(..., min_length=6, max_length=72)


class UserInfo(BaseModel):
    """Who a token pair was issued to."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    role: UserRole
    shop_id: Optional[str] = None


class CurrentUserInfo(UserInfo):
    is_active: bool
    created_at: datetime
    updated_at: datetime


class TokenResponse(BaseModel):
    success: bool = True
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    user: UserInfo


class CurrentUserResponse(BaseModel):
    success: bool = True
    user: CurrentUserInfo
