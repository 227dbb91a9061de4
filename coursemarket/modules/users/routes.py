# coursemarket/modules/users/routes.py
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from coursemarket.core.responses import ApiResponse, MessageResponse
from coursemarket.db.deps import get_current_user, get_db, require_roles
from coursemarket.modules.auth.models import User, UserRole
from coursemarket.modules.users.service import UserService
from coursemarket.schemas.user import RoleUpdate, SuspensionUpdate, UserRead, UserUpdate

router = APIRouter(prefix="/users", tags=["users"])

admin_only = require_roles(UserRole.admin)


@router.get("/me", response_model=ApiResponse[UserRead])
def read_me(current_user: User = Depends(get_current_user)):
    return ApiResponse(
        code=status.HTTP_200_OK,
        message="Profile retrieved",
        data=UserRead.model_validate(current_user),
    )


@router.put("/me", response_model=ApiResponse[UserRead])
def update_me(
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = UserService(db).update_profile(current_user, **payload.model_dump(exclude_unset=True))
    return ApiResponse(
        code=status.HTTP_200_OK,
        message="Profile updated",
        data=UserRead.model_validate(user),
    )


@router.patch("/{user_id}/role", response_model=ApiResponse[UserRead])
def change_role(
    user_id: UUID,
    payload: RoleUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(admin_only),
):
    """Admin-only: change a user's role."""
    user = UserService(db).change_role(user_id, payload.role, admin)
    return ApiResponse(
        code=status.HTTP_200_OK,
        message="Role updated",
        data=UserRead.model_validate(user),
    )


@router.patch("/{user_id}/suspension", response_model=ApiResponse[UserRead])
def set_suspension(
    user_id: UUID,
    payload: SuspensionUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(admin_only),
):
    """Admin-only: suspend or reinstate a user."""
    user = UserService(db).set_suspension(user_id, payload.suspended, admin)
    message = "User suspended" if user.suspended else "User reinstated"
    return ApiResponse(
        code=status.HTTP_200_OK,
        message=message,
        data=UserRead.model_validate(user),
    )


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    admin: User = Depends(admin_only),
):
    """Admin-only: soft-delete a user."""
    UserService(db).soft_delete(user_id, admin)
    return MessageResponse(code=status.HTTP_200_OK, message="User deleted successfully")
