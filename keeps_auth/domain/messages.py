"""
Error code tables - provider codes to error kinds and user-facing text.

ERROR_KINDS is exhaustive over ProviderErrorCode. The per-operation
message tables are partial; lookups fall back to the operation's
generic "try again" text.
"""

from collections.abc import Mapping
from types import MappingProxyType

from .ports import ErrorKind, ProviderErrorCode

ERROR_KINDS = MappingProxyType(
    {
        ProviderErrorCode.EMAIL_ALREADY_IN_USE: ErrorKind.CREDENTIAL,
        ProviderErrorCode.INVALID_EMAIL: ErrorKind.CREDENTIAL,
        ProviderErrorCode.WEAK_PASSWORD: ErrorKind.CREDENTIAL,
        ProviderErrorCode.OPERATION_NOT_ALLOWED: ErrorKind.CREDENTIAL,
        ProviderErrorCode.USER_NOT_FOUND: ErrorKind.CREDENTIAL,
        ProviderErrorCode.WRONG_PASSWORD: ErrorKind.CREDENTIAL,
        ProviderErrorCode.INVALID_CREDENTIAL: ErrorKind.CREDENTIAL,
        ProviderErrorCode.USER_DISABLED: ErrorKind.CREDENTIAL,
        ProviderErrorCode.INVALID_ACTION_CODE: ErrorKind.CREDENTIAL,
        ProviderErrorCode.TOO_MANY_REQUESTS: ErrorKind.RATE_LIMIT,
        ProviderErrorCode.NETWORK_REQUEST_FAILED: ErrorKind.DELIVERY,
        ProviderErrorCode.INTERNAL_ERROR: ErrorKind.CREDENTIAL,
    }
)

# Validation
EMAIL_REQUIRED = "Please enter your email."
PASSWORD_TOO_SHORT = "Password must be at least 6 characters."
EMAIL_REQUIRED_FOR_RESEND = "Enter your email above, then click Resend."
EMAIL_REQUIRED_FOR_RESET = "Enter your email above, then click Forgot password."
PASSWORD_REQUIRED_FOR_RESEND = "Enter the password you used when signing up, then click Resend."

# Notices and warnings
VERIFICATION_SENT = "We sent a verification email. Please verify your email, then log in."
VERIFICATION_SEND_FAILED = (
    "Could not send verification email. Check your Authorized domains "
    "and Project support email in Firebase Console."
)
EMAIL_NOT_VERIFIED = (
    "Your email isn't verified. Click 'Resend verification'. Then check your "
    "inbox/spam and use 'I verified - continue'."
)
DEV_BYPASS_WARNING = (
    "[DEV] Email not verified, but bypass is enabled. "
    "Disable ALLOW_UNVERIFIED_LOGIN for prod."
)
VERIFICATION_RESENT = "Verification email re-sent. Check your inbox (and spam)."
VERIFICATION_RESEND_FAILED = (
    "Could not resend verification email. Check your Authorized domains "
    "and Project support email."
)
STILL_NOT_VERIFIED = "Still not verified. Check your inbox or click Resend."
RECHECK_FAILED = "Could not check verification. Try again."
RESET_SENT = "Password reset email sent. Check your inbox."
TIMED_OUT = "The request timed out. Check your connection and try again."

SIGN_UP_MESSAGES = MappingProxyType(
    {
        ProviderErrorCode.EMAIL_ALREADY_IN_USE: "That email is already registered. Try logging in.",
        ProviderErrorCode.INVALID_EMAIL: "That email looks invalid.",
        ProviderErrorCode.WEAK_PASSWORD: PASSWORD_TOO_SHORT,
        ProviderErrorCode.OPERATION_NOT_ALLOWED: (
            "Email/Password is disabled for this project. "
            "Enable it in Firebase -> Authentication -> Sign-in method."
        ),
        ProviderErrorCode.TOO_MANY_REQUESTS: "Too many attempts. Please wait and try again.",
    }
)
SIGN_UP_FALLBACK = "Sign up failed. Try a different email or password."

LOG_IN_MESSAGES = MappingProxyType(
    {
        ProviderErrorCode.USER_NOT_FOUND: "No account found for that email. Create an account first.",
        ProviderErrorCode.WRONG_PASSWORD: "Incorrect password. Try again.",
        ProviderErrorCode.INVALID_EMAIL: "That email looks invalid.",
        ProviderErrorCode.TOO_MANY_REQUESTS: "Too many attempts. Please wait and try again.",
        ProviderErrorCode.INVALID_CREDENTIAL: (
            "This email may be registered with a different sign-in method "
            "(e.g., Google). Try that method."
        ),
    }
)
LOG_IN_FALLBACK = "Login failed. Check email/password."

RESEND_MESSAGES = MappingProxyType(
    {
        ProviderErrorCode.USER_NOT_FOUND: "No account found for that email. Create an account first.",
        ProviderErrorCode.WRONG_PASSWORD: (
            "Password incorrect. Enter the same password you used when signing up."
        ),
        ProviderErrorCode.TOO_MANY_REQUESTS: "Too many attempts. Please wait and try again.",
    }
)
RESEND_FALLBACK = "Could not resend verification email. Try again later."

RESET_MESSAGES = MappingProxyType(
    {
        ProviderErrorCode.USER_NOT_FOUND: "No account found for that email.",
    }
)
RESET_FALLBACK = "Could not send reset email. Try again later."


def kind_for(code: ProviderErrorCode) -> ErrorKind:
    """Map a provider code to its error kind."""
    return ERROR_KINDS[code]


def message_for(
    code: ProviderErrorCode, table: Mapping[ProviderErrorCode, str], fallback: str
) -> str:
    """Look up the user-facing message for a code, falling back to generic text."""
    return table.get(code, fallback)
