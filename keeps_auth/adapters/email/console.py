"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging verification emails for local development.
"""

import logging
import re

logger = logging.getLogger(__name__)

_HREF = re.compile(r'href="([^"]+)"')


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - prints the first link of each email
    so the verification flow can be completed by hand.
    """

    async def send(self, to: str, subject: str, html: str) -> None:
        """
        Log the email to the console (simulates delivery).

        Args:
            to: Recipient email address (normalized by domain layer)
            subject: Email subject
            html: Rendered HTML body
        """
        match = _HREF.search(html)
        link = match.group(1).replace("&amp;", "&") if match else "-"
        logger.info("[EMAIL] To: %s Subject: %s Link: %s", to, subject, link)
