"""
==============================================================================
User Schemas Module
==============================================================================

Account management and shop permission grant payloads.

==============================================================================
"""

import re
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from app.db.models import UserRole


USERNAME_PATTERN = re.compile(r"^[a-z][a-z0-9_-]*$")


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6, max_length=72)
    role: UserRole = UserRole.SHOP_MANAGER
    shop_id: Optional[str] = Field(default=None, min_length=1, max_length=36)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Lower-cased; a letter followed by letters, digits, '_' or '-'."""
        v = v.lower().strip()
        if not USERNAME_PATTERN.match(v):
            raise ValueError(
                "Username must start with a letter and contain only letters, "
                "numbers, underscores and hyphens"
            )
        return v


class UserUpdate(BaseModel):
    """Fields left out (or null) are not changed."""
    password: Optional[str] = Field(default=None, min_length=6, max_length=72)
    role: Optional[UserRole] = None
    shop_id: Optional[str] = Field(default=None, min_length=1, max_length=36)
    is_active: Optional[bool] = None


class UserDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    role: UserRole
    shop_id: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class UserResponse(BaseModel):
    success: bool = True
    user: UserDetail


class UserListResponse(BaseModel):
    success: bool = True
    users: List[UserDetail]
    total: int


class PermissionGrantRequest(BaseModel):
    """One permission in one shop, e.g. createProduct in shop-b."""
    permission: str = Field(..., min_length=1, max_length=50)
    shop_id: str = Field(..., min_length=1, max_length=36)


class PermissionDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    permission: str
    shop_id: str
    created_at: datetime


class PermissionListResponse(BaseModel):
    success: bool = True
    user_id: str
    permissions: List[PermissionDetail]
