"""
Users API Endpoints (admin only).
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from api.dependencies import require_roles
from api.models import UserListResponse, UserOut, UserResponse
from domain.errors import NotFoundError
from domain.principal import Principal, Role
from repositories.user_repository import get_user_by_id, list_users

router = APIRouter(prefix="/users")


@router.get("", response_model=UserListResponse, summary="List Users")
def get_users(admin: Principal = Depends(require_roles(Role.ADMIN))):
    users = [UserOut.from_principal(user) for user in list_users()]
    return UserListResponse(count=len(users), data=users)


@router.get("/{user_id}", response_model=UserResponse, summary="Get User")
def get_user(user_id: str, admin: Principal = Depends(require_roles(Role.ADMIN))):
    try:
        parsed = UUID(user_id)
    except ValueError:
        raise NotFoundError(f"User not found with id of {user_id}") from None

    user = get_user_by_id(parsed)
    if user is None:
        raise NotFoundError(f"User not found with id of {user_id}")
    return UserResponse(data=UserOut.from_principal(user))
