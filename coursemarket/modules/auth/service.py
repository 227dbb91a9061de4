from __future__ import annotations

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coursemarket.core.logging import get_logger
from coursemarket.core.responses import server_error
from coursemarket.core.security import create_access_token, get_password_hash, verify_password
from coursemarket.integrations.oauth import OAuthProfile
from coursemarket.modules.auth.models import User, UserRole
from coursemarket.modules.auth.repository import UserRepository

logger = get_logger(__name__)


class AuthService:
    """Service layer for authentication operations."""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)

    def register_user(self, name: str, email: str, password: str, role: UserRole) -> User:
        if self.user_repo.get_by_email(email):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="User already exists",
            )

        try:
            user = self.user_repo.create(
                name=name,
                email=email,
                password_hash=get_password_hash(password),
                role=role,
            )
            self.db.commit()
            self.db.refresh(user)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise server_error("Registration failed", e)

        logger.info("user registered", user_id=str(user.id), role=user.role.value)
        return user

    def login(self, email: str, password: str) -> tuple[User, str]:
        """Check credentials and return the account with a fresh access token."""
        user = self.user_repo.get_by_email(email)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Invalid email or password",
            )

        if not user.password_hash or not verify_password(password, user.password_hash):
            logger.warning("login rejected", user_id=str(user.id))
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password",
            )

        self._ensure_active(user)

        logger.info("user logged in", user_id=str(user.id), email=user.email)
        return user, self.issue_token(user)

    def login_with_oauth(self, profile: OAuthProfile) -> tuple[User, str]:
        """Find or create the account behind an OAuth profile.

        Lookup order is provider id, then email (the provider id gets linked to
        the existing account), then a new student account is created. Linking by
        email needs an address the provider has verified; an unverified one that
        is already registered is refused with 409.
        """
        id_field = f"{profile.provider}_id"
        user = self.user_repo.get_by_provider_id(profile.provider, profile.provider_id)

        try:
            if user is None and profile.email:
                user = self.user_repo.get_by_email(profile.email)
                if user is not None and not profile.email_verified:
                    logger.warning(
                        "oauth link refused, email not verified",
                        user_id=str(user.id),
                        provider=profile.provider,
                    )
                    raise HTTPException(
                        status_code=status.HTTP_409_CONFLICT,
                        detail="An account with this email already exists",
                    )
                if user is not None:
                    self.user_repo.update(user, **{id_field: profile.provider_id})
                    logger.info("linked oauth identity", user_id=str(user.id), provider=profile.provider)

            if user is None:
                # some profiles come back without an email address
                email = profile.email or f"{profile.provider}-{profile.provider_id}@users.noreply.coursemarket.io"
                user = self.user_repo.create(
                    name=profile.name,
                    email=email,
                    **{id_field: profile.provider_id},
                )
                logger.info("created oauth account", user_id=str(user.id), provider=profile.provider)

            self.db.commit()
            self.db.refresh(user)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise server_error("OAuth login failed", e)

        self._ensure_active(user)
        return user, self.issue_token(user)

    def issue_token(self, user: User) -> str:
        return create_access_token(subject=str(user.id), role=user.role.value)

    @staticmethod
    def _ensure_active(user: User) -> None:
        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Account is suspended or deleted",
            )
