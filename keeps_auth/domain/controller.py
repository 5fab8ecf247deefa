"""
Client auth controller - verification-gated login state machine.

States (see ControllerState):

    IDLE --op--> BUSY --> AWAITING_VERIFICATION | ACTIVE | FAILED
                     `--> previous rest state (password reset, cancel)

Invariants:
- At most one operation in flight; a call made while BUSY is ignored.
- No unverified session outlives the credential check that produced it,
  unless log_in admits it with the dev bypass enabled AND the environment
  is development. This holds on timeout and cancel too.
- The sign-out after a sign-up or an unverified login completes before
  the resulting state is published.
- The controller never writes the verified flag; it can only ask the
  provider to send another link.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from . import messages
from .exceptions import DeliveryError, ProviderError, ValidationError
from .gate import can_proceed
from .ports import (
    ControllerState,
    ErrorKind,
    IdentityProvider,
    Session,
    VerificationRequester,
)
from .verification import normalize_email

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

_REST_STATES = (
    ControllerState.IDLE,
    ControllerState.AWAITING_VERIFICATION,
    ControllerState.ACTIVE,
)


@dataclass(frozen=True)
class AuthSnapshot:
    """Observable controller state rendered by the presentation layer."""

    state: ControllerState = ControllerState.IDLE
    error_kind: ErrorKind | None = None
    error: str | None = None
    notice: str | None = None
    warning: str | None = None


Listener = Callable[[AuthSnapshot], None]
SessionPolicy = Callable[[Session], bool]


def _never(session: Session) -> bool:
    return False


def _is_verified(session: Session) -> bool:
    return session.verified


class AuthController:
    """
    Drives sign-up, login, resend, recheck and password reset.

    The identity provider is injected so tests can substitute a fake.
    One instance exists per page; nothing is shared across instances.
    """

    def __init__(
        self,
        provider: IdentityProvider,
        continue_url: str,
        *,
        dev_bypass_enabled: bool = False,
        is_dev_environment: bool = False,
        operation_timeout: float | None = 30.0,
        verification_requester: VerificationRequester | None = None,
    ) -> None:
        self._provider = provider
        self._continue_url = continue_url
        self._dev_bypass_enabled = dev_bypass_enabled
        self._is_dev_environment = is_dev_environment
        self._operation_timeout = operation_timeout
        self._requester = verification_requester
        self._snapshot = AuthSnapshot()
        self._listeners: list[Listener] = []
        self._task: asyncio.Task | None = None

    # Observable state

    @property
    def snapshot(self) -> AuthSnapshot:
        return self._snapshot

    @property
    def state(self) -> ControllerState:
        return self._snapshot.state

    @property
    def busy(self) -> bool:
        return self._snapshot.state == ControllerState.BUSY

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for every published snapshot; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, snapshot: AuthSnapshot) -> AuthSnapshot:
        self._snapshot = snapshot
        for listener in list(self._listeners):
            listener(snapshot)
        return snapshot

    def _settle(
        self,
        state: ControllerState,
        *,
        error_kind: ErrorKind | None = None,
        error: str | None = None,
        notice: str | None = None,
        warning: str | None = None,
    ) -> AuthSnapshot:
        return self._publish(
            AuthSnapshot(
                state=state, error_kind=error_kind, error=error, notice=notice, warning=warning
            )
        )

    def _fail(self, kind: ErrorKind, error: str) -> AuthSnapshot:
        return self._settle(ControllerState.FAILED, error_kind=kind, error=error)

    def _rest_state(self) -> ControllerState:
        # A failure is not a place to return to
        state = self._snapshot.state
        return state if state in _REST_STATES else ControllerState.IDLE

    # Operations

    async def sign_up(self, email: str, password: str) -> AuthSnapshot:
        """Create an account, request a verification link, then sign out."""
        if self.busy:
            return self._snapshot
        email_norm = normalize_email(email)
        if not email_norm:
            return self._fail(ErrorKind.VALIDATION, messages.EMAIL_REQUIRED)
        if len(password or "") < MIN_PASSWORD_LENGTH:
            return self._fail(ErrorKind.VALIDATION, messages.PASSWORD_TOO_SHORT)
        return await self._run(
            lambda rest: self._sign_up(email_norm, password), keep_session=_never
        )

    async def log_in(self, email: str, password: str) -> AuthSnapshot:
        """Check credentials; only verified accounts (or the dev bypass) become ACTIVE."""
        if self.busy:
            return self._snapshot
        email_norm = normalize_email(email)
        if not email_norm:
            return self._fail(ErrorKind.VALIDATION, messages.EMAIL_REQUIRED)
        return await self._run(
            lambda rest: self._log_in(email_norm, password), keep_session=self._passes_gate
        )

    async def resend_verification(self, email: str, password: str | None = None) -> AuthSnapshot:
        """
        Ask for another verification link.

        With a password the controller signs in transiently to obtain a
        handle, requests the link and signs out again. Without one, the
        request goes to the server boundary keyed only by email, when a
        VerificationRequester was injected.
        """
        if self.busy:
            return self._snapshot
        email_norm = normalize_email(email)
        if not email_norm:
            return self._fail(ErrorKind.VALIDATION, messages.EMAIL_REQUIRED_FOR_RESEND)
        if password is None:
            if self._requester is None:
                return self._fail(ErrorKind.VALIDATION, messages.PASSWORD_REQUIRED_FOR_RESEND)
            return await self._run(lambda rest: self._resend_by_email(email_norm))
        return await self._run(
            lambda rest: self._resend(email_norm, password), keep_session=_never
        )

    async def recheck_verification(self, email: str, password: str) -> AuthSnapshot:
        """Re-authenticate and promote the session to ACTIVE if the account is now verified."""
        if self.busy:
            return self._snapshot
        email_norm = normalize_email(email)
        if not email_norm:
            return self._fail(ErrorKind.VALIDATION, messages.EMAIL_REQUIRED)
        return await self._run(
            lambda rest: self._recheck(email_norm, password), keep_session=_is_verified
        )

    async def request_password_reset(self, email: str) -> AuthSnapshot:
        """Ask the provider for a reset email; the rest state is left unchanged."""
        if self.busy:
            return self._snapshot
        email_norm = normalize_email(email)
        if not email_norm:
            return self._settle(
                self._rest_state(),
                error_kind=ErrorKind.VALIDATION,
                error=messages.EMAIL_REQUIRED_FOR_RESET,
            )
        return await self._run(lambda rest: self._reset(email_norm, rest))

    async def sign_out(self) -> AuthSnapshot:
        """Sign the current session out and return to IDLE."""
        if self.busy:
            return self._snapshot
        await self._provider.sign_out()
        return self._settle(ControllerState.IDLE)

    def cancel(self) -> bool:
        """
        Cancel the in-flight operation.

        Returns True when an operation was cancelled. The awaiting caller
        receives CancelledError; the controller returns to its prior rest state.
        """
        if self._task is None or self._task.done():
            return False
        return self._task.cancel()

    async def _run(
        self,
        operation: Callable[[ControllerState], Awaitable[AuthSnapshot]],
        *,
        keep_session: SessionPolicy | None = None,
    ) -> AuthSnapshot:
        """
        Run one operation under the BUSY guard and the operation timeout.

        keep_session decides whether a session found after a timeout or
        cancel may stay signed in. None leaves the session untouched, for
        operations that never sign in.
        """
        rest = self._rest_state()
        self._settle(ControllerState.BUSY)
        self._task = asyncio.current_task()
        try:
            async with asyncio.timeout(self._operation_timeout):
                return await operation(rest)
        except TimeoutError:
            logger.warning("Auth operation timed out after %ss", self._operation_timeout)
            await self._discard_session(keep_session)
            return self._fail(ErrorKind.TIMEOUT, messages.TIMED_OUT)
        except asyncio.CancelledError:
            logger.info("Auth operation cancelled")
            await self._discard_session(keep_session)
            self._settle(rest)
            raise
        finally:
            self._task = None

    def _passes_gate(self, session: Session) -> bool:
        return can_proceed(
            self._provider.current_session() is not None,
            session.verified,
            self._dev_bypass_enabled,
            self._is_dev_environment,
        )

    async def _discard_session(self, keep_session: SessionPolicy | None) -> None:
        if keep_session is None:
            return
        session = self._provider.current_session()
        if session is not None and not keep_session(session):
            await self._provider.sign_out()

    async def _sign_up(self, email: str, password: str) -> AuthSnapshot:
        try:
            session = await self._provider.create_account(email, password)
        except ProviderError as e:
            logger.warning("Sign up failed for %s: %s", email, e.code.value)
            return self._fail(
                messages.kind_for(e.code),
                messages.message_for(e.code, messages.SIGN_UP_MESSAGES, messages.SIGN_UP_FALLBACK),
            )

        notice = warning = None
        try:
            await self._provider.send_verification_link(session, self._continue_url)
            notice = messages.VERIFICATION_SENT
        except ProviderError as e:
            logger.warning("Verification link not sent for %s: %s", email, e.code.value)
            warning = messages.VERIFICATION_SEND_FAILED
        finally:
            await self._provider.sign_out()

        return self._settle(ControllerState.AWAITING_VERIFICATION, notice=notice, warning=warning)

    async def _log_in(self, email: str, password: str) -> AuthSnapshot:
        try:
            session = await self._provider.sign_in(email, password)
        except ProviderError as e:
            logger.warning("Login failed for %s: %s", email, e.code.value)
            return self._fail(
                messages.kind_for(e.code),
                messages.message_for(e.code, messages.LOG_IN_MESSAGES, messages.LOG_IN_FALLBACK),
            )

        if self._passes_gate(session):
            warning = None
            if not session.verified:
                logger.warning("Dev bypass: %s entered without a verified email", email)
                warning = messages.DEV_BYPASS_WARNING
            return self._settle(ControllerState.ACTIVE, warning=warning)

        await self._provider.sign_out()
        return self._settle(ControllerState.AWAITING_VERIFICATION, error=messages.EMAIL_NOT_VERIFIED)

    async def _resend(self, email: str, password: str) -> AuthSnapshot:
        try:
            session = await self._provider.sign_in(email, password)
        except ProviderError as e:
            logger.warning("Resend sign-in failed for %s: %s", email, e.code.value)
            return self._fail(
                messages.kind_for(e.code),
                messages.message_for(e.code, messages.RESEND_MESSAGES, messages.RESEND_FALLBACK),
            )

        delivered = False
        try:
            await self._provider.send_verification_link(session, self._continue_url)
            delivered = True
        except ProviderError as e:
            logger.warning("Verification link not re-sent for %s: %s", email, e.code.value)
        finally:
            await self._provider.sign_out()

        if not delivered:
            return self._fail(ErrorKind.DELIVERY, messages.VERIFICATION_RESEND_FAILED)
        return self._settle(
            ControllerState.AWAITING_VERIFICATION, notice=messages.VERIFICATION_RESENT
        )

    async def _resend_by_email(self, email: str) -> AuthSnapshot:
        try:
            await self._requester.request_verification_email(email)
        except ValidationError:
            return self._fail(ErrorKind.VALIDATION, messages.EMAIL_REQUIRED_FOR_RESEND)
        except DeliveryError:
            logger.warning("Server could not re-send verification for %s", email)
            return self._fail(ErrorKind.DELIVERY, messages.VERIFICATION_RESEND_FAILED)
        return self._settle(
            ControllerState.AWAITING_VERIFICATION, notice=messages.VERIFICATION_RESENT
        )

    async def _recheck(self, email: str, password: str) -> AuthSnapshot:
        try:
            session = await self._provider.sign_in(email, password)
        except ProviderError as e:
            logger.warning("Recheck sign-in failed for %s: %s", email, e.code.value)
            return self._fail(messages.kind_for(e.code), messages.RECHECK_FAILED)

        # Only a verified flag promotes here; the dev bypass applies to log_in.
        has_session = self._provider.current_session() is not None
        if can_proceed(has_session, session.verified, False, False):
            return self._settle(ControllerState.ACTIVE)

        await self._provider.sign_out()
        return self._settle(
            ControllerState.AWAITING_VERIFICATION, error=messages.STILL_NOT_VERIFIED
        )

    async def _reset(self, email: str, rest: ControllerState) -> AuthSnapshot:
        try:
            await self._provider.send_password_reset(email)
        except ProviderError as e:
            logger.warning("Password reset failed for %s: %s", email, e.code.value)
            return self._settle(
                rest,
                error_kind=messages.kind_for(e.code),
                error=messages.message_for(e.code, messages.RESET_MESSAGES, messages.RESET_FALLBACK),
            )
        return self._settle(rest, notice=messages.RESET_SENT)
