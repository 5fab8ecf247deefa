"""
Resend email sender adapter - Implements EmailSender protocol.

Simple HTTP POST to the Resend API. Failures raise so the link issuer
can log them and report a generic delivery error.
"""

import logging

import httpx
from pydantic import SecretStr

from keeps_auth.domain.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
_RESEND_TIMEOUT = 10.0


class ResendEmailSender:
    """Delivers HTML email through the Resend API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: SecretStr,
        sender: str,
        *,
        api_url: str = RESEND_API_URL,
    ) -> None:
        self._client = client
        self._api_key = api_key
        self._sender = sender
        self._api_url = api_url

    async def send(self, to: str, subject: str, html: str) -> None:
        """
        Send one email.

        Raises:
            ConfigurationError: RESEND_API_KEY is not set
            httpx.HTTPError: transport failure or non-2xx response
        """
        api_key = self._api_key.get_secret_value()
        if not api_key:
            raise ConfigurationError("Missing RESEND_API_KEY")

        resp = await self._client.post(
            self._api_url,
            headers={"Authorization": f"Bearer {api_key}"},
            json={
                "from": self._sender,
                "to": to,
                "subject": subject,
                "html": html,
            },
            timeout=_RESEND_TIMEOUT,
        )
        resp.raise_for_status()
        logger.debug("Resend accepted email to %s: %s", to, resp.text)
