"""
Verification API client - Implements VerificationRequester protocol.

Lets the client controller ask the server boundary for a fresh
verification email keyed only by address, without re-authenticating.
"""

import logging

import httpx

from keeps_auth.domain.exceptions import DeliveryError, ValidationError

logger = logging.getLogger(__name__)

_TIMEOUT = 15.0


class HttpVerificationRequester:
    """Calls POST /send-verification on the server boundary."""

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self._client = client
        self._url = f"{base_url.rstrip('/')}/send-verification"

    async def request_verification_email(self, email: str) -> None:
        try:
            resp = await self._client.post(self._url, json={"email": email}, timeout=_TIMEOUT)
        except httpx.HTTPError as e:
            logger.warning("Verification endpoint unreachable: %s", e)
            raise DeliveryError("Failed to send verification email") from e

        if resp.status_code == 400:
            raise ValidationError("Email is required")
        if resp.status_code >= 400:
            logger.warning("Verification endpoint returned %s", resp.status_code)
            raise DeliveryError("Failed to send verification email")
