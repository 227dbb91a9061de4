"""OAuth login providers (Google, Facebook)."""

from .base import OAuthError, OAuthProfile, OAuthProvider
from .facebook import FacebookOAuth
from .google import GoogleOAuth

PROVIDERS = {
    "google": GoogleOAuth,
    "facebook": FacebookOAuth,
}


def get_oauth_provider(name: str) -> OAuthProvider:
    return PROVIDERS[name]()


__all__ = [
    "OAuthError",
    "OAuthProfile",
    "OAuthProvider",
    "GoogleOAuth",
    "FacebookOAuth",
    "PROVIDERS",
    "get_oauth_provider",
]
