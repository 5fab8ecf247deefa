"""
Domain exceptions - Semantic error types for verification-gated auth.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Each exception carries the ErrorKind the presentation layer renders.
"""

from .ports import ErrorKind, ProviderErrorCode


class AuthError(Exception):
    """Base class for authentication domain errors."""

    kind: ErrorKind = ErrorKind.CREDENTIAL


class ValidationError(AuthError):
    """Empty/malformed email or password under the minimum length."""

    kind = ErrorKind.VALIDATION


class CredentialError(AuthError):
    """Credential check or account creation rejected by the provider."""

    kind = ErrorKind.CREDENTIAL


class RateLimitError(AuthError):
    """Provider signalled too many attempts."""

    kind = ErrorKind.RATE_LIMIT


class DeliveryError(AuthError):
    """Verification link could not be minted or the email was not delivered."""

    kind = ErrorKind.DELIVERY


class ConfigurationError(AuthError):
    """Required secret or key missing at the server boundary."""

    kind = ErrorKind.CONFIGURATION


class ProviderError(Exception):
    """
    Error reported by an identity provider adapter.

    Adapters translate their native failures into one of the closed
    ProviderErrorCode values; anything unrecognised becomes INTERNAL_ERROR.
    """

    def __init__(self, code: ProviderErrorCode | str, message: str = "") -> None:
        self.code = ProviderErrorCode.parse(code)
        super().__init__(message or self.code.value)
