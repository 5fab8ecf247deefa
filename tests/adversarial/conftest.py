"""
Shared fixtures for adversarial tests.

Provides common test infrastructure for brute force, timing and race tests.
"""

import asyncio

import pytest

from keeps_auth.adapters.identity.memory import InMemoryIdentityProvider
from keeps_auth.domain.controller import AuthController
from keeps_auth.domain.ports import Session
from tests.conftest import CONTINUE_URL

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial

NETWORK_LATENCY = 0.005


class LatentIdentityProvider(InMemoryIdentityProvider):
    """In-memory provider that yields before each call, like a network round trip."""

    async def create_account(
        self, email: str, password: str, display_name: str | None = None
    ) -> Session:
        await asyncio.sleep(NETWORK_LATENCY)
        return await super().create_account(email, password, display_name)

    async def sign_in(self, email: str, password: str) -> Session:
        await asyncio.sleep(NETWORK_LATENCY)
        return await super().sign_in(email, password)


@pytest.fixture
def locking_provider() -> LatentIdentityProvider:
    """Provider that locks an account after three failed sign-ins."""
    return LatentIdentityProvider(bcrypt_rounds=4, max_attempts=3)


@pytest.fixture
def attacked_controller(locking_provider: LatentIdentityProvider) -> AuthController:
    """Controller facing the locking provider, dev bypass off."""
    return AuthController(locking_provider, CONTINUE_URL, operation_timeout=5.0)
