"""
Domain layer - Pure business logic with zero framework imports.

This package contains the verification-gated authentication core:
the client auth controller, the session gate and the link issuer.
It defines its own port interfaces for infrastructure abstraction,
ensuring true hexagonal architecture decoupling.
"""

from .controller import AuthController, AuthSnapshot
from .exceptions import (
    AuthError,
    ConfigurationError,
    CredentialError,
    DeliveryError,
    ProviderError,
    RateLimitError,
    ValidationError,
)
from .gate import can_proceed
from .ports import (
    Account,
    ControllerState,
    EmailSender,
    ErrorKind,
    IdentityProvider,
    LinkMinter,
    ProviderErrorCode,
    Session,
    VerificationLink,
    VerificationRequester,
)
from .verification import LinkIssuer, normalize_email, render_verification_email

__all__ = [
    "Account",
    "AuthController",
    "AuthError",
    "AuthSnapshot",
    "ConfigurationError",
    "ControllerState",
    "CredentialError",
    "DeliveryError",
    "EmailSender",
    "ErrorKind",
    "IdentityProvider",
    "LinkIssuer",
    "LinkMinter",
    "ProviderError",
    "ProviderErrorCode",
    "RateLimitError",
    "Session",
    "ValidationError",
    "VerificationLink",
    "VerificationRequester",
    "can_proceed",
    "normalize_email",
    "render_verification_email",
]
