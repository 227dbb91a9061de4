from urllib.parse import urlencode

import httpx

from coursemarket.core.config import settings
from coursemarket.core.logging import get_logger

from .base import OAuthError, OAuthProfile, OAuthProvider

logger = get_logger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"


class GoogleOAuth(OAuthProvider):
    name = "google"

    def get_login_url(self) -> str:
        params = {
            "client_id": settings.GOOGLE_CLIENT_ID,
            "redirect_uri": settings.GOOGLE_REDIRECT_URI,
            "response_type": "code",
            "scope": "openid email profile",
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> OAuthProfile:
        async with httpx.AsyncClient(timeout=settings.GATEWAY_TIMEOUT_SECONDS) as client:
            try:
                token_res = await client.post(
                    GOOGLE_TOKEN_URL,
                    data={
                        "client_id": settings.GOOGLE_CLIENT_ID,
                        "client_secret": settings.GOOGLE_CLIENT_SECRET,
                        "code": code,
                        "grant_type": "authorization_code",
                        "redirect_uri": settings.GOOGLE_REDIRECT_URI,
                    },
                )
                token_res.raise_for_status()
                access_token = token_res.json()["access_token"]

                user_res = await client.get(
                    GOOGLE_USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                user_res.raise_for_status()
                info = user_res.json()
            except (httpx.HTTPError, KeyError, ValueError) as e:
                logger.error("google oauth failed", error=str(e))
                raise OAuthError(f"Google login failed: {e}") from e

        if "sub" not in info:
            raise OAuthError("Google profile has no subject id")

        return OAuthProfile(
            provider=self.name,
            provider_id=str(info["sub"]),
            name=info.get("name") or info.get("email") or "Google user",
            email=info.get("email"),
            email_verified=info.get("email_verified") in (True, "true"),
        )
