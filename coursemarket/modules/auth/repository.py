from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy.orm import Session

from coursemarket.modules.auth.models import User, UserRole


class UserRepository:
    """Repository for User entity with CRUD operations."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get user by ID."""
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        return self.db.query(User).filter(User.email == email).first()

    def get_by_provider_id(self, provider: str, provider_id: str) -> Optional[User]:
        """Get user by OAuth provider id (``google`` or ``facebook``)."""
        column = User.google_id if provider == "google" else User.facebook_id
        return self.db.query(User).filter(column == provider_id).first()

    def create(
        self,
        name: str,
        email: str,
        password_hash: Optional[str] = None,
        role: UserRole = UserRole.student,
        **provider_ids,
    ) -> User:
        """Create a new user."""
        user = User(
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            **provider_ids,
        )
        self.db.add(user)
        self.db.flush()  # flush to get the ID without committing
        return user

    def update(self, user: User, **kwargs) -> User:
        """Update user fields."""
        for key, value in kwargs.items():
            if hasattr(user, key):
                setattr(user, key, value)
        self.db.flush()
        return user
