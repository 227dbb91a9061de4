from urllib.parse import urlencode

import httpx

from coursemarket.core.config import settings
from coursemarket.core.logging import get_logger

from .base import OAuthError, OAuthProfile, OAuthProvider

logger = get_logger(__name__)

FACEBOOK_AUTH_URL = "https://www.facebook.com/v19.0/dialog/oauth"
FACEBOOK_TOKEN_URL = "https://graph.facebook.com/v19.0/oauth/access_token"
FACEBOOK_PROFILE_URL = "https://graph.facebook.com/me"


class FacebookOAuth(OAuthProvider):
    name = "facebook"

    def get_login_url(self) -> str:
        params = {
            "client_id": settings.FACEBOOK_APP_ID,
            "redirect_uri": settings.FACEBOOK_REDIRECT_URI,
            "response_type": "code",
            "scope": "email",
        }
        return f"{FACEBOOK_AUTH_URL}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> OAuthProfile:
        async with httpx.AsyncClient(timeout=settings.GATEWAY_TIMEOUT_SECONDS) as client:
            try:
                token_res = await client.get(
                    FACEBOOK_TOKEN_URL,
                    params={
                        "client_id": settings.FACEBOOK_APP_ID,
                        "client_secret": settings.FACEBOOK_APP_SECRET,
                        "redirect_uri": settings.FACEBOOK_REDIRECT_URI,
                        "code": code,
                    },
                )
                token_res.raise_for_status()
                access_token = token_res.json()["access_token"]

                user_res = await client.get(
                    FACEBOOK_PROFILE_URL,
                    params={
                        "fields": "id,email,first_name,last_name",
                        "access_token": access_token,
                    },
                )
                user_res.raise_for_status()
                info = user_res.json()
            except (httpx.HTTPError, KeyError, ValueError) as e:
                logger.error("facebook oauth failed", error=str(e))
                raise OAuthError(f"Facebook login failed: {e}") from e

        if "id" not in info:
            raise OAuthError("Facebook profile has no id")

        name = " ".join(
            part for part in (info.get("first_name"), info.get("last_name")) if part
        )
        return OAuthProfile(
            provider=self.name,
            provider_id=str(info["id"]),
            name=name or "Facebook user",
            email=info.get("email"),
            # the Graph API does not say whether the address was confirmed
            email_verified=False,
        )
