"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure, together with the value types that cross them.
Adapters implement these protocols.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol


class ControllerState(str, Enum):
    """
    Client auth controller states.

    Transitions:
    - IDLE -> BUSY (any operation starts)
    - BUSY -> AWAITING_VERIFICATION | ACTIVE | FAILED | previous rest state
    - AWAITING_VERIFICATION / ACTIVE / FAILED -> BUSY (user re-triggers)

    There is no terminal state; the machine lives as long as its page.
    """

    IDLE = "IDLE"
    BUSY = "BUSY"
    AWAITING_VERIFICATION = "AWAITING_VERIFICATION"
    ACTIVE = "ACTIVE"
    FAILED = "FAILED"


class ErrorKind(str, Enum):
    """Closed set of error kinds surfaced to the presentation layer."""

    VALIDATION = "validation"
    CREDENTIAL = "credential"
    RATE_LIMIT = "rate_limit"
    DELIVERY = "delivery"
    CONFIGURATION = "configuration"
    TIMEOUT = "timeout"


class ProviderErrorCode(str, Enum):
    """Closed set of identity provider error codes understood by the domain."""

    EMAIL_ALREADY_IN_USE = "auth/email-already-in-use"
    INVALID_EMAIL = "auth/invalid-email"
    WEAK_PASSWORD = "auth/weak-password"
    OPERATION_NOT_ALLOWED = "auth/operation-not-allowed"
    USER_NOT_FOUND = "auth/user-not-found"
    WRONG_PASSWORD = "auth/wrong-password"
    INVALID_CREDENTIAL = "auth/invalid-credential"
    USER_DISABLED = "auth/user-disabled"
    TOO_MANY_REQUESTS = "auth/too-many-requests"
    INVALID_ACTION_CODE = "auth/invalid-action-code"
    NETWORK_REQUEST_FAILED = "auth/network-request-failed"
    INTERNAL_ERROR = "auth/internal-error"

    @classmethod
    def parse(cls, code: "ProviderErrorCode | str") -> "ProviderErrorCode":
        """Return the matching code, or INTERNAL_ERROR for anything unknown."""
        try:
            return cls(code)
        except ValueError:
            return cls.INTERNAL_ERROR


@dataclass(frozen=True)
class Account:
    """Account record as exposed by the identity provider."""

    email: str
    verified: bool = False
    display_name: str | None = None


@dataclass(frozen=True)
class Session:
    """Ephemeral authenticated context bound to one account."""

    email: str
    verified: bool
    id_token: str = ""


@dataclass(frozen=True)
class VerificationLink:
    """
    One-time verification link minted by the identity provider.

    Lifetime and single-use enforcement belong to the provider;
    expires_at is informational and may be unknown.
    """

    url: str
    target_email: str
    continuation_url: str
    single_use: bool = True
    expires_at: datetime | None = None


class IdentityProvider(Protocol):
    """Port interface for the client-side identity provider handle."""

    async def create_account(self, email: str, password: str) -> Session:
        """
        Create an account and sign it in.

        Raises:
            ProviderError: e.g. auth/email-already-in-use, auth/weak-password
        """
        ...

    async def sign_in(self, email: str, password: str) -> Session:
        """
        Check credentials and make the resulting session current.

        The returned session carries the account's verified flag as
        of the credential check.

        Raises:
            ProviderError: e.g. auth/user-not-found, auth/wrong-password
        """
        ...

    async def send_verification_link(self, session: Session, continue_url: str) -> None:
        """Ask the provider to email a verification link for the session's account."""
        ...

    async def send_password_reset(self, email: str) -> None:
        """Ask the provider to email a password reset link."""
        ...

    async def sign_out(self) -> None:
        """Discard the current session, if any."""
        ...

    def current_session(self) -> Session | None:
        """Return the current session, or None when signed out."""
        ...


class LinkMinter(Protocol):
    """Port interface for server-side verification link minting."""

    async def mint_verification_link(self, email: str, continue_url: str) -> VerificationLink:
        """
        Mint a fresh verification link bound to continue_url.

        Every call yields a new link; earlier links stay valid until the
        provider expires or consumes them.
        """
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    async def send(self, to: str, subject: str, html: str) -> None:
        """
        Deliver an HTML email.

        Raises:
            Exception: any delivery failure; callers treat it as DeliveryError
        """
        ...


class VerificationRequester(Protocol):
    """Port interface for asking the server boundary to issue a link by email."""

    async def request_verification_email(self, email: str) -> None:
        """
        Request a verification email for the address.

        Raises:
            ValidationError: empty email
            DeliveryError: server reported a delivery failure
        """
        ...
