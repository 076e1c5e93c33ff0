"""
==============================================================================
User Management Endpoints
==============================================================================

Accounts and their per-shop permission grants. The whole router requires
the admin role.

==============================================================================
"""

from typing import Dict, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.db.models import User, UserRole
from app.core.dependencies import get_pagination, require_admin
from app.services.permission_service import PermissionService
from app.services.user_service import UserService
from app.schemas.user import (
    PermissionDetail,
    PermissionGrantRequest,
    PermissionListResponse,
    UserCreate,
    UserDetail,
    UserListResponse,
    UserResponse,
    UserUpdate,
)
from app.schemas.common import MessageResponse


router = APIRouter(prefix="/users", tags=["Users"], dependencies=[Depends(require_admin)])


class UserController:
    """Account and grant management."""

    def __init__(self, db: Session):
        self._users = UserService(db)
        self._permissions = PermissionService(db)

    @staticmethod
    def _wrap(user: User) -> UserResponse:
        return UserResponse(user=UserDetail.model_validate(user))

    def create(self, data: UserCreate) -> UserResponse:
        return self._wrap(self._users.create_user(data))

    def list_all(
        self,
        role: Optional[UserRole],
        shop_id: Optional[str],
        pagination: Dict[str, int]
    ) -> UserListResponse:
        page = self._users.list_users(
            role=role,
            shop_id=shop_id,
            offset=pagination["offset"],
            limit=pagination["page_size"]
        )
        return UserListResponse(
            users=[UserDetail.model_validate(user) for user in page],
            total=self._users.count_users(role=role, shop_id=shop_id)
        )

    def get(self, user_id: str) -> UserResponse:
        return self._wrap(self._users.get_by_id(user_id))

    def update(self, user_id: str, data: UserUpdate) -> UserResponse:
        return self._wrap(self._users.update_user(user_id, data))

    def deactivate(self, user_id: str) -> MessageResponse:
        user = self._users.deactivate_user(user_id)
        return MessageResponse(message=f"User '{user.username}' deactivated")

    def permissions(self, user_id: str) -> PermissionListResponse:
        return self._grants_of(self._users.get_by_id(user_id))

    def grant(self, user_id: str, data: PermissionGrantRequest) -> PermissionListResponse:
        user = self._users.get_by_id(user_id)
        self._permissions.grant(user, data.permission, data.shop_id)
        return self._grants_of(user)

    def revoke(self, user_id: str, permission: str, shop_id: str) -> PermissionListResponse:
        user = self._users.get_by_id(user_id)
        self._permissions.revoke(user, permission, shop_id)
        return self._grants_of(user)

    def _grants_of(self, user: User) -> PermissionListResponse:
        grants = self._permissions.list_grants(user)
        return PermissionListResponse(
            user_id=user.id,
            permissions=[PermissionDetail.model_validate(grant) for grant in grants]
        )


def get_controller(db: Session = Depends(get_db)) -> UserController:
    return UserController(db)


@router.post("", response_model=UserResponse)
async def create_user(request: UserCreate, controller: UserController = Depends(get_controller)):
    """Create a user. New users default to the shop manager role."""
    return controller.create(request)


@router.get("", response_model=UserListResponse)
async def list_users(
    role: Optional[UserRole] = Query(None),
    shop_id: Optional[str] = Query(None, description="Active shop"),
    pagination: Dict[str, int] = Depends(get_pagination),
    controller: UserController = Depends(get_controller)
):
    return controller.list_all(role, shop_id, pagination)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, controller: UserController = Depends(get_controller)):
    return controller.get(user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    request: UserUpdate,
    controller: UserController = Depends(get_controller)
):
    """Change password, role, active shop or active flag."""
    return controller.update(user_id, request)


@router.delete("/{user_id}", response_model=MessageResponse)
async def deactivate_user(user_id: str, controller: UserController = Depends(get_controller)):
    """Deactivate a user; the account is kept."""
    return controller.deactivate(user_id)


@router.get("/{user_id}/permissions", response_model=PermissionListResponse)
async def list_permissions(user_id: str, controller: UserController = Depends(get_controller)):
    return controller.permissions(user_id)


@router.post("/{user_id}/permissions", response_model=PermissionListResponse)
async def grant_permission(
    user_id: str,
    request: PermissionGrantRequest,
    controller: UserController = Depends(get_controller)
):
    """Grant a permission in a shop. Granting twice is a no-op."""
    return controller.grant(user_id, request)


@router.delete("/{user_id}/permissions", response_model=PermissionListResponse)
async def revoke_permission(
    user_id: str,
    permission: str = Query(..., min_length=1),
    shop_id: str = Query(..., min_length=1),
    controller: UserController = Depends(get_controller)
):
    return controller.revoke(user_id, permission, shop_id)
