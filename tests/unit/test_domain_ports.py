"""
Unit tests for domain ports and exceptions.

Tests verify:
- Enums carry the expected values
- Exceptions carry their error kind
- Port protocols accept structural implementations
- Domain purity (zero framework imports)
"""

import subprocess
from enum import Enum
from pathlib import Path

import pytest

from keeps_auth.adapters.identity import InMemoryIdentityProvider
from keeps_auth.domain.exceptions import (
    AuthError,
    ConfigurationError,
    CredentialError,
    DeliveryError,
    ProviderError,
    RateLimitError,
    ValidationError,
)
from keeps_auth.domain.ports import (
    ControllerState,
    ErrorKind,
    IdentityProvider,
    LinkMinter,
    ProviderErrorCode,
    Session,
    VerificationLink,
)

DOMAIN_DIR = Path(__file__).resolve().parents[2] / "keeps_auth" / "domain"


class TestControllerStateEnum:
    """Tests for ControllerState enum."""

    def test_controller_state_is_enum(self) -> None:
        """ControllerState is an Enum class."""
        assert issubclass(ControllerState, Enum)

    def test_controller_state_values(self) -> None:
        """ControllerState has exactly the five lifecycle states."""
        assert {s.value for s in ControllerState} == {
            "IDLE",
            "BUSY",
            "AWAITING_VERIFICATION",
            "ACTIVE",
            "FAILED",
        }


class TestErrorKindEnum:
    """Tests for ErrorKind enum."""

    def test_error_kind_values(self) -> None:
        """ErrorKind covers every failure category."""
        assert ErrorKind.RATE_LIMIT.value == "rate_limit"
        assert {k.name for k in ErrorKind} == {
            "VALIDATION",
            "CREDENTIAL",
            "RATE_LIMIT",
            "DELIVERY",
            "CONFIGURATION",
            "TIMEOUT",
        }


class TestProviderErrorCode:
    """Tests for ProviderErrorCode parsing."""

    def test_parse_known_code(self) -> None:
        """Known code strings parse to members."""
        assert (
            ProviderErrorCode.parse("auth/email-already-in-use")
            == ProviderErrorCode.EMAIL_ALREADY_IN_USE
        )

    def test_parse_unknown_code(self) -> None:
        """Unknown code strings become INTERNAL_ERROR."""
        assert ProviderErrorCode.parse("auth/brand-new") == ProviderErrorCode.INTERNAL_ERROR

    def test_parse_member_is_identity(self) -> None:
        """Members pass through unchanged."""
        assert ProviderErrorCode.parse(ProviderErrorCode.USER_DISABLED) is (
            ProviderErrorCode.USER_DISABLED
        )


class TestDomainTypes:
    """Tests for value types."""

    def test_session_is_frozen(self) -> None:
        """Sessions are immutable snapshots."""
        session = Session(email="a@x.com", verified=False)
        with pytest.raises(AttributeError):
            session.verified = True  # type: ignore[misc]

    def test_verification_link_defaults(self) -> None:
        """Links are single-use by default."""
        link = VerificationLink(url="u", target_email="a@x.com", continuation_url="c")
        assert link.single_use is True
        assert link.expires_at is None


class TestExceptions:
    """Tests for domain exceptions."""

    @pytest.mark.parametrize(
        "exc_type,kind",
        [
            (ValidationError, ErrorKind.VALIDATION),
            (CredentialError, ErrorKind.CREDENTIAL),
            (RateLimitError, ErrorKind.RATE_LIMIT),
            (DeliveryError, ErrorKind.DELIVERY),
            (ConfigurationError, ErrorKind.CONFIGURATION),
        ],
    )
    def test_exception_kind(self, exc_type: type[AuthError], kind: ErrorKind) -> None:
        """Each AuthError subclass carries its kind."""
        assert issubclass(exc_type, AuthError)
        assert exc_type("x").kind == kind

    def test_provider_error_normalizes_code(self) -> None:
        """ProviderError accepts raw strings and keeps a closed code."""
        error = ProviderError("auth/something-else")
        assert error.code == ProviderErrorCode.INTERNAL_ERROR
        assert str(error) == "auth/internal-error"

    def test_provider_error_message(self) -> None:
        """An explicit message wins over the code."""
        error = ProviderError(ProviderErrorCode.WRONG_PASSWORD, "bad password")
        assert error.code == ProviderErrorCode.WRONG_PASSWORD
        assert str(error) == "bad password"


class TestProtocols:
    """Tests for structural port compliance."""

    def test_memory_provider_satisfies_ports(self) -> None:
        """The in-memory provider is both an IdentityProvider and a LinkMinter."""
        provider = InMemoryIdentityProvider()

        def accepts(p: IdentityProvider, m: LinkMinter) -> None:
            pass

        accepts(provider, provider)
        assert InMemoryIdentityProvider.__bases__ == (object,)


class TestDomainPurity:
    """Tests that the domain layer has zero framework imports."""

    @pytest.mark.parametrize(
        "pattern",
        ["from fastapi", "import fastapi", "from pydantic", "import httpx", "firebase_admin"],
    )
    def test_no_framework_imports_in_domain(self, pattern: str) -> None:
        """Domain layer does not import web, HTTP or SDK frameworks."""
        result = subprocess.run(
            ["grep", "-r", pattern, str(DOMAIN_DIR)],
            capture_output=True,
            text=True,
        )
        assert result.returncode != 0, f"{pattern} found: {result.stdout}"
