"""
Link issuer - mints verification links and hands them to the email sender.

Two entry points share one sequence (validate -> mint -> render -> send):

- on_account_created: fired by the account-creation event. Never raises;
  the account must not fail because of a downstream email problem.
- send_on_demand: reachable from the client. Surfaces ValidationError
  and DeliveryError to the caller.

Provider and transport errors are logged here and replaced by a
generic DeliveryError so no provider internals reach the client.
"""

import html
import logging
from dataclasses import dataclass

from .exceptions import ConfigurationError, DeliveryError, ValidationError
from .ports import Account, EmailSender, LinkMinter, VerificationLink

logger = logging.getLogger(__name__)

DEFAULT_APP_NAME = "Keeps"


def normalize_email(email: str | None) -> str:
    """
    Normalize email address for consistent lookup.

    Applies: strip whitespace + lowercase
    """
    return (email or "").strip().lower()


def render_verification_email(
    link: str, display_name: str | None = None, app_name: str = DEFAULT_APP_NAME
) -> tuple[str, str]:
    """
    Render the verification email.

    Returns:
        Tuple of (subject, html_body). The body carries the link both as a
        button and as copyable text, greeting the display name when present.
    """
    subject = f"Verify your email for {app_name}"
    greeting = f"Hi {html.escape(display_name)}," if display_name else "Hi,"
    safe_link = html.escape(link, quote=True)
    safe_app = html.escape(app_name)
    body = f"""
    <div style="font-family:system-ui,Segoe UI,Roboto,Arial;line-height:1.5;color:#111">
      <h2 style="margin:0 0 12px">Verify your email</h2>
      <p style="margin:0 0 12px">{greeting} thanks for signing up to <b>{safe_app}</b>.</p>
      <p style="margin:0 0 16px">Click the button below to verify your email and continue:</p>
      <p style="margin:0 0 16px">
        <a href="{safe_link}" style="display:inline-block;padding:12px 16px;border-radius:8px;background:#111;color:#fff;text-decoration:none;font-weight:600">Verify Email</a>
      </p>
      <p style="margin:0 0 8px;color:#555">If the button doesn't work, copy &amp; paste this link:</p>
      <code style="word-break:break-all;color:#444">{safe_link}</code>
    </div>
    """
    return subject, body


@dataclass
class LinkIssuer:
    """
    Server-boundary service issuing verification emails.

    Every call mints a new link; earlier unexpired links stay valid
    (their lifetime is owned by the identity provider).
    """

    minter: LinkMinter
    email_sender: EmailSender
    continue_url: str
    app_name: str = DEFAULT_APP_NAME

    async def issue(self, email: str, display_name: str | None = None) -> VerificationLink:
        """
        Mint a link for email and deliver it.

        Raises:
            ValidationError: email missing or empty
            DeliveryError: minting or delivery failed (details are logged)
        """
        normalized_email = normalize_email(email)
        if not normalized_email:
            raise ValidationError("Email is required.")

        try:
            link = await self.minter.mint_verification_link(normalized_email, self.continue_url)
            subject, body = render_verification_email(link.url, display_name, self.app_name)
            await self.email_sender.send(normalized_email, subject, body)
        except ConfigurationError:
            logger.error("Verification email not sent to %s: server misconfigured", normalized_email)
            raise DeliveryError("Failed to send verification email.") from None
        except Exception:
            logger.exception("Verification email not sent to %s", normalized_email)
            raise DeliveryError("Failed to send verification email.") from None

        logger.info("Verification email sent to %s", normalized_email)
        return link

    async def send_on_demand(self, email: str) -> None:
        """On-demand variant: errors propagate to the caller."""
        await self.issue(email)

    async def on_account_created(self, account: Account) -> None:
        """Account-creation hook: errors are logged and swallowed."""
        if not account.email:
            return
        try:
            await self.issue(account.email, account.display_name)
        except (ValidationError, DeliveryError) as e:
            logger.warning("Account-created hook for %s failed: %s", account.email, e)
