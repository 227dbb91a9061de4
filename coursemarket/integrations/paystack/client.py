"""Paystack client used to initialize and verify course payments."""

import json
from typing import Any, Dict, Optional

import httpx

from coursemarket.core.config import settings
from coursemarket.core.logging import get_logger

logger = get_logger(__name__)


class PaystackError(Exception):
    """Gateway call failed or returned an unusable payload."""


class PaystackClient:
    """Thin async wrapper over the Paystack transaction API."""

    def __init__(self, secret_key: str = None, base_url: str = None):
        self.base_url = base_url or settings.PAYSTACK_BASE_URL
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=settings.GATEWAY_TIMEOUT_SECONDS,
            headers={
                "Authorization": f"Bearer {secret_key or settings.PAYSTACK_SECRET_KEY}",
                "Content-Type": "application/json",
            },
        )

    async def initialize_transaction(
        self,
        email: str,
        amount: int,
        metadata: Dict[str, Any],
        callback_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create a transaction; returns ``{authorization_url, access_code, reference}``."""
        payload: Dict[str, Any] = {
            "email": email,
            "amount": amount,
            "metadata": metadata,
        }
        if callback_url:
            payload["callback_url"] = callback_url

        data = await self._request("POST", "/transaction/initialize", json=payload)
        logger.info(
            "paystack transaction initialized",
            reference=data.get("reference"),
            amount=amount,
        )
        return data

    async def verify_transaction(self, reference: str) -> Dict[str, Any]:
        """Fetch a transaction; ``status`` is e.g. success, abandoned, failed."""
        data = await self._request("GET", f"/transaction/verify/{reference}")
        metadata = data.get("metadata")
        # Paystack echoes metadata as a JSON string when it was sent as one
        if isinstance(metadata, str):
            try:
                data["metadata"] = json.loads(metadata)
            except ValueError:
                data["metadata"] = {}
        return data

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            message = _gateway_message(e.response) or str(e)
            logger.error("paystack request rejected", url=url, status_code=e.response.status_code, error=message)
            raise PaystackError(message) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("paystack request failed", url=url, error=str(e))
            raise PaystackError(str(e)) from e

        if not body.get("status"):
            raise PaystackError(body.get("message") or "Paystack request was not successful")
        return body.get("data") or {}

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()


def _gateway_message(response: httpx.Response) -> Optional[str]:
    try:
        return response.json().get("message")
    except ValueError:
        return None


# Global client instance
_paystack_client: Optional[PaystackClient] = None


def get_paystack_client() -> PaystackClient:
    """Get the global Paystack client."""
    global _paystack_client
    if _paystack_client is None:
        _paystack_client = PaystackClient()
    return _paystack_client


async def close_paystack_client() -> None:
    """Close the global client if one was created."""
    global _paystack_client
    if _paystack_client is not None:
        await _paystack_client.close()
        _paystack_client = None
