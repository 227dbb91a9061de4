from __future__ import annotations

from collections.abc import Callable, Generator
import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from coursemarket.core.access import is_authorized
from coursemarket.core.logging import get_logger
from coursemarket.core.security import decode_access_token
from coursemarket.db.session import SessionLocal
from coursemarket.modules.auth.models import User, UserRole

logger = get_logger(__name__)


# ---------- DB DEPENDENCY ----------


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ---------- AUTH DEPENDENCIES ----------

# auto_error is off so a missing token maps to 401 and a bad one to 403
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_current_user(
    db: Session = Depends(get_db),
    token: str | None = Depends(oauth2_scheme),
) -> User:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token not provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_access_token(token)
        sub = payload.get("sub")
        if sub is None:
            raise ValueError("token has no subject")
        user_id = uuid.UUID(sub)
    except (JWTError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized, invalid token",
        )

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if user.deleted:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account has been deleted",
        )
    if user.suspended:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is suspended",
        )

    return user


def require_roles(*roles: UserRole) -> Callable[..., User]:
    """Dependency factory: pass only authenticated users holding one of ``roles``."""
    required = frozenset(roles)

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if not is_authorized(current_user.role, required):
            logger.warning(
                "role check failed",
                user_id=str(current_user.id),
                role=current_user.role.value,
                required=sorted(r.value for r in required),
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied: No Permission",
            )
        return current_user

    return dependency
