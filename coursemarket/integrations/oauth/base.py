from dataclasses import dataclass
from typing import Optional


class OAuthError(Exception):
    """Code exchange or profile lookup failed."""


@dataclass
class OAuthProfile:
    provider: str
    provider_id: str
    name: str
    email: Optional[str] = None
    # only a provider-verified address may be matched against local accounts
    email_verified: bool = False


class OAuthProvider:
    name: str = ""

    def get_login_url(self) -> str:
        raise NotImplementedError

    async def fetch_profile(self, code: str) -> OAuthProfile:
        raise NotImplementedError
