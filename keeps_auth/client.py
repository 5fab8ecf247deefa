"""
Client wiring - builds an AuthController from settings.

The presentation layer owns the httpx.AsyncClient and creates one
controller per page.
"""

import httpx

from keeps_auth.adapters.identity import FirebaseRestIdentityProvider, InMemoryIdentityProvider
from keeps_auth.adapters.verification_api import HttpVerificationRequester
from keeps_auth.config.settings import Settings
from keeps_auth.domain.controller import AuthController
from keeps_auth.domain.ports import IdentityProvider


def build_identity_provider(settings: Settings, client: httpx.AsyncClient) -> IdentityProvider:
    """Select the identity provider adapter named by IDENTITY_BACKEND."""
    if settings.identity_backend == "memory":
        return InMemoryIdentityProvider()
    return FirebaseRestIdentityProvider(client, settings.firebase_api_key)


def build_controller(
    settings: Settings,
    client: httpx.AsyncClient,
    provider: IdentityProvider | None = None,
) -> AuthController:
    """
    Create an auth controller with injected dependencies.

    The dev bypass is passed through only as settings resolved it: the flag
    alone is not enough, the environment must be development too.
    """
    return AuthController(
        provider or build_identity_provider(settings, client),
        settings.continue_url,
        dev_bypass_enabled=settings.allow_unverified_login,
        is_dev_environment=settings.is_development,
        operation_timeout=settings.operation_timeout_seconds,
        verification_requester=HttpVerificationRequester(client, settings.verification_api_url),
    )
