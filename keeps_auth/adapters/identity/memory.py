"""
In-memory identity provider - Implements IdentityProvider and LinkMinter.

Development and test stand-in for the hosted identity provider. It keeps
accounts in a dict, hashes passwords with bcrypt, counts failed sign-ins
and publishes an "account created" event the link issuer subscribes to.

Behaviour mirrors the hosted provider where the domain depends on it:
- emails are unique after strip + lowercase
- verified moves false -> true exactly once and never back
- every mint yields a new single-use link; older unexpired links stay valid
- too many failed sign-ins yield auth/too-many-requests
"""

import logging
import secrets
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from urllib.parse import parse_qs, urlencode, urlparse

import bcrypt

from keeps_auth.domain.exceptions import ProviderError
from keeps_auth.domain.ports import Account, ProviderErrorCode, Session, VerificationLink
from keeps_auth.domain.verification import normalize_email

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
DEFAULT_ACTION_URL = "http://localhost:9099/__/auth/action"

_DUMMY_PASSWORD = b"dummy_password_for_timing_safety"

AccountCreatedListener = Callable[[Account], Awaitable[None]]


@dataclass
class _AccountRecord:
    email: str
    password_hash: bytes
    verified: bool = False
    display_name: str | None = None
    disabled: bool = False
    failed_attempts: int = 0

    def to_account(self) -> Account:
        return Account(email=self.email, verified=self.verified, display_name=self.display_name)


@dataclass
class _PendingLink:
    email: str
    expires_at: datetime


class InMemoryIdentityProvider:
    """
    Implements IdentityProvider and LinkMinter protocols in process memory.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Minted links are appended to `outbox` so the flow can be driven by hand.
    """

    def __init__(
        self,
        *,
        max_attempts: int = 5,
        bcrypt_rounds: int = 10,
        link_ttl: timedelta = timedelta(hours=1),
        action_url: str = DEFAULT_ACTION_URL,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._accounts: dict[str, _AccountRecord] = {}
        self._links: dict[str, _PendingLink] = {}
        self._session: Session | None = None
        self._listeners: list[AccountCreatedListener] = []
        self._max_attempts = max_attempts
        self._bcrypt_rounds = bcrypt_rounds
        # Same cost as real hashes so unknown emails still pay for a full comparison
        self._dummy_hash = bcrypt.hashpw(_DUMMY_PASSWORD, bcrypt.gensalt(bcrypt_rounds))
        self._link_ttl = link_ttl
        self._action_url = action_url
        self._clock = clock
        self.outbox: list[VerificationLink] = []
        self.password_resets: list[str] = []

    def on_account_created(self, listener: AccountCreatedListener) -> None:
        """Subscribe to the account-creation event."""
        self._listeners.append(listener)

    def get_account(self, email: str) -> Account | None:
        record = self._accounts.get(normalize_email(email))
        return record.to_account() if record else None

    def disable_account(self, email: str) -> None:
        self._require(normalize_email(email)).disabled = True

    def mark_verified(self, email: str) -> None:
        """Flip verified to True; a no-op for already verified accounts."""
        record = self._require(normalize_email(email))
        if not record.verified:
            record.verified = True
            logger.info("Account verified: %s", record.email)

    def open_link(self, url: str) -> str:
        """
        Consume a verification link as if the user clicked it.

        Returns:
            The continuation URL the user is sent to

        Raises:
            ProviderError: auth/invalid-action-code for unknown, used or expired links
        """
        query = parse_qs(urlparse(url).query)
        code = (query.get("oobCode") or [""])[0]
        pending = self._links.pop(code, None)
        if pending is None or pending.expires_at <= self._clock():
            raise ProviderError(ProviderErrorCode.INVALID_ACTION_CODE)
        self.mark_verified(pending.email)
        return (query.get("continueUrl") or [""])[0]

    async def create_account(
        self, email: str, password: str, display_name: str | None = None
    ) -> Session:
        normalized_email = normalize_email(email)
        if "@" not in normalized_email:
            raise ProviderError(ProviderErrorCode.INVALID_EMAIL)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ProviderError(ProviderErrorCode.WEAK_PASSWORD)
        if normalized_email in self._accounts:
            raise ProviderError(ProviderErrorCode.EMAIL_ALREADY_IN_USE)

        record = _AccountRecord(
            email=normalized_email,
            password_hash=bcrypt.hashpw(password.encode(), bcrypt.gensalt(self._bcrypt_rounds)),
            display_name=display_name,
        )
        self._accounts[normalized_email] = record
        self._session = self._new_session(record)
        logger.info("Account created: %s", normalized_email)

        for listener in list(self._listeners):
            try:
                await listener(record.to_account())
            except Exception:
                logger.exception("Account-created listener failed for %s", normalized_email)
        return self._session

    async def sign_in(self, email: str, password: str) -> Session:
        normalized_email = normalize_email(email)
        record = self._accounts.get(normalized_email)
        password_hash = record.password_hash if record else self._dummy_hash
        password_ok = bcrypt.checkpw((password or "").encode(), password_hash)

        if record is None:
            raise ProviderError(ProviderErrorCode.USER_NOT_FOUND)
        if record.disabled:
            raise ProviderError(ProviderErrorCode.USER_DISABLED)
        if record.failed_attempts >= self._max_attempts:
            raise ProviderError(ProviderErrorCode.TOO_MANY_REQUESTS)
        if not password_ok:
            record.failed_attempts += 1
            raise ProviderError(ProviderErrorCode.WRONG_PASSWORD)

        record.failed_attempts = 0
        self._session = self._new_session(record)
        return self._session

    async def send_verification_link(self, session: Session, continue_url: str) -> None:
        if self._session is None or self._session.id_token != session.id_token:
            raise ProviderError(ProviderErrorCode.INVALID_CREDENTIAL)
        await self.mint_verification_link(session.email, continue_url)

    async def mint_verification_link(self, email: str, continue_url: str) -> VerificationLink:
        record = self._accounts.get(normalize_email(email))
        if record is None:
            raise ProviderError(ProviderErrorCode.USER_NOT_FOUND)

        code = secrets.token_urlsafe(24)
        expires_at = self._clock() + self._link_ttl
        self._links[code] = _PendingLink(email=record.email, expires_at=expires_at)
        params = urlencode({"mode": "verifyEmail", "oobCode": code, "continueUrl": continue_url})
        link = VerificationLink(
            url=f"{self._action_url}?{params}",
            target_email=record.email,
            continuation_url=continue_url,
            expires_at=expires_at,
        )
        self.outbox.append(link)
        return link

    async def send_password_reset(self, email: str) -> None:
        normalized_email = normalize_email(email)
        if normalized_email not in self._accounts:
            raise ProviderError(ProviderErrorCode.USER_NOT_FOUND)
        self.password_resets.append(normalized_email)

    async def sign_out(self) -> None:
        self._session = None

    def current_session(self) -> Session | None:
        return self._session

    def _require(self, email: str) -> _AccountRecord:
        record = self._accounts.get(email)
        if record is None:
            raise ProviderError(ProviderErrorCode.USER_NOT_FOUND)
        return record

    def _new_session(self, record: _AccountRecord) -> Session:
        return Session(
            email=record.email,
            verified=record.verified,
            id_token=secrets.token_urlsafe(16),
        )
