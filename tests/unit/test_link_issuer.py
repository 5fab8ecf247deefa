"""
Unit tests for LinkIssuer and the verification email template.

Tests use mocked ports to verify:
- Validation before any provider call
- Mint -> render -> send sequencing
- Generic DeliveryError for every downstream failure
- The hook variant swallowing its errors
"""

import logging
from unittest.mock import AsyncMock

import pytest

from keeps_auth.adapters.identity.memory import InMemoryIdentityProvider
from keeps_auth.domain.exceptions import ConfigurationError, DeliveryError, ValidationError
from keeps_auth.domain.ports import Account, VerificationLink
from keeps_auth.domain.verification import LinkIssuer, render_verification_email
from tests.conftest import CONTINUE_URL, RecordingEmailSender

LINK = "https://example.firebaseapp.com/__/auth/action?mode=verifyEmail&oobCode=abc"


def _minter() -> AsyncMock:
    minter = AsyncMock()
    minter.mint_verification_link.return_value = VerificationLink(
        url=LINK, target_email="a@x.com", continuation_url=CONTINUE_URL
    )
    return minter


class TestRenderVerificationEmail:
    """Tests for the email template contract."""

    def test_subject_contains_product_name(self) -> None:
        """Subject is fixed and names the product."""
        subject, _ = render_verification_email(LINK, app_name="Keeps")
        assert subject == "Verify your email for Keeps"

    def test_body_contains_link_as_button_and_text(self) -> None:
        """The link appears as an href and as copyable text."""
        _, body = render_verification_email("https://x.test/verify?code=1")
        assert 'href="https://x.test/verify?code=1"' in body
        assert "<code" in body
        assert body.count("https://x.test/verify?code=1") == 2

    def test_greeting_uses_display_name(self) -> None:
        """Display name is greeted when present."""
        _, body = render_verification_email(LINK, display_name="Ada")
        assert "Hi Ada," in body

    def test_greeting_without_display_name(self) -> None:
        """Generic greeting without a display name."""
        _, body = render_verification_email(LINK)
        assert "Hi," in body

    def test_display_name_is_escaped(self) -> None:
        """Markup in display names is escaped."""
        _, body = render_verification_email(LINK, display_name="<script>x</script>")
        assert "<script>" not in body
        assert "&lt;script&gt;" in body


class TestIssue:
    """Tests for LinkIssuer.issue()."""

    @pytest.mark.asyncio
    async def test_issue_mints_and_sends(self, email_sender: RecordingEmailSender) -> None:
        """Link is minted for the normalized email and emailed."""
        minter = _minter()
        issuer = LinkIssuer(minter=minter, email_sender=email_sender, continue_url=CONTINUE_URL)

        link = await issuer.issue("  A@X.com ", "Ada")

        minter.mint_verification_link.assert_awaited_once_with("a@x.com", CONTINUE_URL)
        assert link.url == LINK
        assert len(email_sender.sent) == 1
        assert email_sender.sent[0].to == "a@x.com"
        assert email_sender.sent[0].subject == "Verify your email for Keeps"
        assert "Hi Ada," in email_sender.sent[0].html

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email", ["", "   ", None])
    async def test_issue_requires_email(
        self, email_sender: RecordingEmailSender, email: str | None
    ) -> None:
        """Missing or blank email fails before minting."""
        minter = _minter()
        issuer = LinkIssuer(minter=minter, email_sender=email_sender, continue_url=CONTINUE_URL)

        with pytest.raises(ValidationError):
            await issuer.issue(email)

        minter.mint_verification_link.assert_not_awaited()
        assert email_sender.sent == []

    @pytest.mark.asyncio
    async def test_mint_failure_is_generic_delivery_error(
        self, email_sender: RecordingEmailSender, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Minting errors are logged and replaced by a generic DeliveryError."""
        minter = AsyncMock()
        minter.mint_verification_link.side_effect = RuntimeError("provider internals: quota")
        issuer = LinkIssuer(minter=minter, email_sender=email_sender, continue_url=CONTINUE_URL)

        with caplog.at_level(logging.ERROR), pytest.raises(DeliveryError) as exc_info:
            await issuer.issue("a@x.com")

        assert "quota" not in str(exc_info.value)
        assert "a@x.com" in caplog.text
        assert email_sender.sent == []

    @pytest.mark.asyncio
    async def test_send_failure_is_delivery_error(self) -> None:
        """Transport errors become DeliveryError."""
        sender = RecordingEmailSender(fail_with=ConnectionError("smtp down"))
        issuer = LinkIssuer(minter=_minter(), email_sender=sender, continue_url=CONTINUE_URL)

        with pytest.raises(DeliveryError):
            await issuer.issue("a@x.com")

    @pytest.mark.asyncio
    async def test_configuration_error_is_delivery_error(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Missing secrets are logged server-side and reported as delivery failures."""
        sender = RecordingEmailSender(fail_with=ConfigurationError("Missing RESEND_API_KEY"))
        issuer = LinkIssuer(minter=_minter(), email_sender=sender, continue_url=CONTINUE_URL)

        with caplog.at_level(logging.ERROR), pytest.raises(DeliveryError) as exc_info:
            await issuer.issue("a@x.com")

        assert "RESEND_API_KEY" not in str(exc_info.value)
        assert "misconfigured" in caplog.text

    @pytest.mark.asyncio
    async def test_repeated_calls_mint_new_links(
        self, provider: InMemoryIdentityProvider, email_sender: RecordingEmailSender
    ) -> None:
        """Every call mints a new link; earlier ones stay valid."""
        await provider.create_account("a@x.com", "secret1")
        issuer = LinkIssuer(minter=provider, email_sender=email_sender, continue_url=CONTINUE_URL)

        first = await issuer.issue("a@x.com")
        second = await issuer.issue("a@x.com")

        assert first.url != second.url
        provider.open_link(first.url)
        assert provider.get_account("a@x.com").verified is True


class TestEntryPoints:
    """Tests for the hook and on-demand variants."""

    @pytest.mark.asyncio
    async def test_on_demand_surfaces_errors(self, email_sender: RecordingEmailSender) -> None:
        """send_on_demand propagates ValidationError."""
        issuer = LinkIssuer(minter=_minter(), email_sender=email_sender, continue_url=CONTINUE_URL)
        with pytest.raises(ValidationError):
            await issuer.send_on_demand("")

    @pytest.mark.asyncio
    async def test_hook_swallows_delivery_errors(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """on_account_created logs failures instead of raising."""
        sender = RecordingEmailSender(fail_with=ConnectionError("down"))
        issuer = LinkIssuer(minter=_minter(), email_sender=sender, continue_url=CONTINUE_URL)

        with caplog.at_level(logging.WARNING):
            await issuer.on_account_created(Account(email="a@x.com"))

        assert "Account-created hook" in caplog.text

    @pytest.mark.asyncio
    async def test_hook_ignores_accounts_without_email(
        self, email_sender: RecordingEmailSender
    ) -> None:
        """Accounts without an email (phone, anonymous) are skipped."""
        minter = _minter()
        issuer = LinkIssuer(minter=minter, email_sender=email_sender, continue_url=CONTINUE_URL)

        await issuer.on_account_created(Account(email=""))

        minter.mint_verification_link.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_hook_greets_display_name(self, email_sender: RecordingEmailSender) -> None:
        """The hook passes the account's display name into the template."""
        issuer = LinkIssuer(minter=_minter(), email_sender=email_sender, continue_url=CONTINUE_URL)

        await issuer.on_account_created(Account(email="a@x.com", display_name="Ada"))

        assert "Hi Ada," in email_sender.sent[0].html

    @pytest.mark.asyncio
    async def test_hook_fires_on_account_creation(
        self, provider: InMemoryIdentityProvider, email_sender: RecordingEmailSender
    ) -> None:
        """Subscribed to the provider, the hook emails every new account."""
        issuer = LinkIssuer(minter=provider, email_sender=email_sender, continue_url=CONTINUE_URL)
        provider.on_account_created(issuer.on_account_created)

        await provider.create_account("a@x.com", "secret1", display_name="Ada")

        assert [m.to for m in email_sender.sent] == ["a@x.com"]
