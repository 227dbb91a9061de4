from __future__ import annotations

import uuid

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coursemarket.core.logging import get_logger
from coursemarket.core.responses import server_error
from coursemarket.modules.auth.models import User, UserRole
from coursemarket.modules.auth.repository import UserRepository

logger = get_logger(__name__)


class UserService:
    """Profile updates and admin account management. Accounts are never hard-deleted."""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)

    def get_user(self, user_id: uuid.UUID) -> User:
        user = self.user_repo.get_by_id(user_id)
        if not user or user.deleted:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        return user

    def update_profile(self, user: User, **update_data) -> User:
        # nulls mean "keep"; every profile column is required
        update_data = {k: v for k, v in update_data.items() if v is not None}
        try:
            user = self.user_repo.update(user, **update_data)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise server_error("Error updating profile", e)
        self.db.refresh(user)
        return user

    def change_role(self, user_id: uuid.UUID, role: UserRole, admin: User) -> User:
        user = self.get_user(user_id)
        if user.id == admin.id and role != UserRole.admin:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Admins cannot demote themselves",
            )

        user = self.user_repo.update(user, role=role)
        self.db.commit()
        self.db.refresh(user)
        logger.info("role changed", user_id=str(user.id), role=role.value, by=str(admin.id))
        return user

    def set_suspension(self, user_id: uuid.UUID, suspended: bool, admin: User) -> User:
        user = self.get_user(user_id)
        if user.id == admin.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Admins cannot suspend themselves",
            )

        user = self.user_repo.update(user, suspended=suspended)
        self.db.commit()
        self.db.refresh(user)
        logger.info("suspension changed", user_id=str(user.id), suspended=suspended, by=str(admin.id))
        return user

    def soft_delete(self, user_id: uuid.UUID, admin: User) -> None:
        user = self.get_user(user_id)
        if user.id == admin.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Admins cannot delete themselves",
            )

        self.user_repo.update(user, deleted=True)
        self.db.commit()
        logger.info("user soft-deleted", user_id=str(user.id), by=str(admin.id))
