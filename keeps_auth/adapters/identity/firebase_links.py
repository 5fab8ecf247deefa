"""
Firebase Admin link minter - Implements LinkMinter protocol.

Mints verification links with the Admin SDK so the server can deliver
them through its own email sender. The SDK is blocking, so calls run
in a worker thread.
"""

import asyncio
import json
import logging

import firebase_admin
from firebase_admin import auth, credentials
from pydantic import SecretStr

from keeps_auth.domain.exceptions import ConfigurationError
from keeps_auth.domain.ports import VerificationLink

logger = logging.getLogger(__name__)

_APP_NAME = "keeps-auth"


class FirebaseAdminLinkMinter:
    """Implements LinkMinter protocol via firebase_admin.auth."""

    def __init__(self, service_account: SecretStr, *, app_name: str = _APP_NAME) -> None:
        self._service_account = service_account
        self._app_name = app_name
        self._app: firebase_admin.App | None = None

    def _get_app(self) -> firebase_admin.App:
        if self._app is not None:
            return self._app
        raw = self._service_account.get_secret_value()
        if not raw:
            raise ConfigurationError("Missing FIREBASE_SERVICE_ACCOUNT")
        try:
            self._app = firebase_admin.get_app(self._app_name)
        except ValueError:
            cert = credentials.Certificate(json.loads(raw))
            self._app = firebase_admin.initialize_app(cert, name=self._app_name)
            logger.info("Firebase Admin app initialised: %s", self._app_name)
        return self._app

    async def mint_verification_link(self, email: str, continue_url: str) -> VerificationLink:
        app = self._get_app()
        settings = auth.ActionCodeSettings(url=continue_url, handle_code_in_app=False)
        url = await asyncio.to_thread(
            auth.generate_email_verification_link, email, settings, app=app
        )
        return VerificationLink(url=url, target_email=email, continuation_url=continue_url)
