"""
Firebase REST identity provider - Implements IdentityProvider protocol.

Talks to the Identity Toolkit REST API with the project's web API key,
the same calls the Firebase client SDK makes. Signing out discards the
held ID token; the REST API has no server-side sign-out.
"""

import logging
from typing import Any

import httpx

from keeps_auth.domain.exceptions import ConfigurationError, ProviderError
from keeps_auth.domain.ports import ProviderErrorCode, Session

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"
_TIMEOUT = 20.0

# REST error messages look like "WEAK_PASSWORD : Password should be ..."
_REST_ERROR_CODES = {
    "EMAIL_EXISTS": ProviderErrorCode.EMAIL_ALREADY_IN_USE,
    "INVALID_EMAIL": ProviderErrorCode.INVALID_EMAIL,
    "MISSING_EMAIL": ProviderErrorCode.INVALID_EMAIL,
    "WEAK_PASSWORD": ProviderErrorCode.WEAK_PASSWORD,
    "OPERATION_NOT_ALLOWED": ProviderErrorCode.OPERATION_NOT_ALLOWED,
    "PASSWORD_LOGIN_DISABLED": ProviderErrorCode.OPERATION_NOT_ALLOWED,
    "EMAIL_NOT_FOUND": ProviderErrorCode.USER_NOT_FOUND,
    "USER_NOT_FOUND": ProviderErrorCode.USER_NOT_FOUND,
    "INVALID_PASSWORD": ProviderErrorCode.WRONG_PASSWORD,
    "INVALID_LOGIN_CREDENTIALS": ProviderErrorCode.INVALID_CREDENTIAL,
    "INVALID_ID_TOKEN": ProviderErrorCode.INVALID_CREDENTIAL,
    "USER_DISABLED": ProviderErrorCode.USER_DISABLED,
    "TOO_MANY_ATTEMPTS_TRY_LATER": ProviderErrorCode.TOO_MANY_REQUESTS,
    "INVALID_OOB_CODE": ProviderErrorCode.INVALID_ACTION_CODE,
    "EXPIRED_OOB_CODE": ProviderErrorCode.INVALID_ACTION_CODE,
}


def parse_rest_error(body: Any) -> ProviderErrorCode:
    """Map an Identity Toolkit error body to a provider code."""
    message = ""
    if isinstance(body, dict):
        error = body.get("error") or {}
        if isinstance(error, dict):
            message = str(error.get("message") or "")
    key = message.split(":", 1)[0].strip()
    return _REST_ERROR_CODES.get(key, ProviderErrorCode.INTERNAL_ERROR)


class FirebaseRestIdentityProvider:
    """
    Implements IdentityProvider protocol via the Identity Toolkit REST API.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        *,
        base_url: str = IDENTITY_TOOLKIT_URL,
    ) -> None:
        if not api_key:
            raise ConfigurationError("Missing FIREBASE_API_KEY")
        self._client = client
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._session: Session | None = None

    async def _call(self, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = await self._client.post(
                f"{self._base_url}/accounts:{method}",
                params={"key": self._api_key},
                json=payload,
                timeout=_TIMEOUT,
            )
        except httpx.HTTPError as e:
            logger.warning("Identity Toolkit %s unreachable: %s", method, e)
            raise ProviderError(ProviderErrorCode.NETWORK_REQUEST_FAILED) from e

        if resp.status_code >= 400:
            try:
                body = resp.json()
            except ValueError:
                body = None
            code = parse_rest_error(body)
            logger.debug("Identity Toolkit %s failed (%s): %s", method, resp.status_code, resp.text)
            raise ProviderError(code)
        return resp.json()

    async def create_account(self, email: str, password: str) -> Session:
        data = await self._call(
            "signUp", {"email": email, "password": password, "returnSecureToken": True}
        )
        self._session = Session(
            email=data.get("email", email), verified=False, id_token=data["idToken"]
        )
        return self._session

    async def sign_in(self, email: str, password: str) -> Session:
        data = await self._call(
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        id_token = data["idToken"]
        lookup = await self._call("lookup", {"idToken": id_token})
        users = lookup.get("users") or [{}]
        self._session = Session(
            email=data.get("email", email),
            verified=bool(users[0].get("emailVerified", False)),
            id_token=id_token,
        )
        return self._session

    async def send_verification_link(self, session: Session, continue_url: str) -> None:
        await self._call(
            "sendOobCode",
            {
                "requestType": "VERIFY_EMAIL",
                "idToken": session.id_token,
                "continueUrl": continue_url,
                "canHandleCodeInApp": False,
            },
        )

    async def send_password_reset(self, email: str) -> None:
        await self._call("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})

    async def sign_out(self) -> None:
        self._session = None

    def current_session(self) -> Session | None:
        return self._session
