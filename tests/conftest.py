"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- An in-memory identity provider with cheap bcrypt hashing
- A recording email sender
- Auth controllers wired to the fake provider
"""

from dataclasses import dataclass, field

import pytest

from keeps_auth.adapters.identity.memory import InMemoryIdentityProvider
from keeps_auth.domain.controller import AuthController

CONTINUE_URL = "http://localhost:5173/login"


@dataclass
class SentEmail:
    to: str
    subject: str
    html: str


@dataclass
class RecordingEmailSender:
    """EmailSender double that records messages, optionally failing."""

    sent: list[SentEmail] = field(default_factory=list)
    fail_with: Exception | None = None

    async def send(self, to: str, subject: str, html: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(SentEmail(to=to, subject=subject, html=html))


@pytest.fixture
def provider() -> InMemoryIdentityProvider:
    """In-memory identity provider (bcrypt cost 4 keeps tests fast)."""
    return InMemoryIdentityProvider(bcrypt_rounds=4, max_attempts=3)


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    """Recording email sender."""
    return RecordingEmailSender()


@pytest.fixture
def controller(provider: InMemoryIdentityProvider) -> AuthController:
    """Controller with the dev bypass off."""
    return AuthController(provider, CONTINUE_URL, operation_timeout=5.0)
