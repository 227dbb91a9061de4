# coursemarket/modules/auth/routes.py
from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from coursemarket.core.config import settings
from coursemarket.core.logging import get_logger
from coursemarket.core.responses import ApiResponse, MessageResponse
from coursemarket.db.deps import get_db
from coursemarket.integrations.oauth import OAuthError, OAuthProvider, get_oauth_provider
from coursemarket.modules.auth.service import AuthService
from coursemarket.schemas.auth import LoginRequest, Token
from coursemarket.schemas.user import UserCreate

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
def register_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
):
    """Register a new user. Nothing about the account is echoed back."""
    auth_service = AuthService(db)
    auth_service.register_user(
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=payload.role,
    )
    return MessageResponse(code=status.HTTP_201_CREATED, message="User registered successfully")


@router.post("/login", response_model=ApiResponse[Token])
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
):
    """Login user and return a bearer token."""
    auth_service = AuthService(db)
    user, token = auth_service.login(email=payload.email, password=payload.password)
    return ApiResponse(
        code=status.HTTP_200_OK,
        message="User logged in successfully",
        data=Token(token=token, user_id=user.id),
    )


# ---------- OAUTH ----------


def google_provider() -> OAuthProvider:
    return get_oauth_provider("google")


def facebook_provider() -> OAuthProvider:
    return get_oauth_provider("facebook")


async def _oauth_callback(code: str | None, provider: OAuthProvider, db: Session):
    if not code:
        return RedirectResponse(settings.OAUTH_FAILURE_REDIRECT)

    try:
        profile = await provider.fetch_profile(code)
    except OAuthError as e:
        logger.warning("oauth callback failed", provider=provider.name, error=str(e))
        return RedirectResponse(settings.OAUTH_FAILURE_REDIRECT)

    auth_service = AuthService(db)
    user, token = auth_service.login_with_oauth(profile)
    return ApiResponse(
        code=status.HTTP_200_OK,
        message="User logged in successfully",
        data=Token(token=token, user_id=user.id),
    )


@router.get("/google")
def google_login(provider: OAuthProvider = Depends(google_provider)):
    return RedirectResponse(provider.get_login_url())


@router.get("/google/callback", response_model=ApiResponse[Token])
async def google_callback(
    code: str | None = None,
    provider: OAuthProvider = Depends(google_provider),
    db: Session = Depends(get_db),
):
    return await _oauth_callback(code, provider, db)


@router.get("/facebook")
def facebook_login(provider: OAuthProvider = Depends(facebook_provider)):
    return RedirectResponse(provider.get_login_url())


@router.get("/facebook/callback", response_model=ApiResponse[Token])
async def facebook_callback(
    code: str | None = None,
    provider: OAuthProvider = Depends(facebook_provider),
    db: Session = Depends(get_db),
):
    return await _oauth_callback(code, provider, db)
