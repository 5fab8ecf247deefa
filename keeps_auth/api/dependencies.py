"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting the link issuer
and settings into routes, plus the builders the lifespan uses to wire
adapters from configuration.
"""

import json

import httpx
from fastapi import Request

from keeps_auth.adapters.email import ConsoleEmailSender, ResendEmailSender
from keeps_auth.adapters.identity import FirebaseAdminLinkMinter, InMemoryIdentityProvider
from keeps_auth.api.models import EmailRequest
from keeps_auth.config.settings import Settings, get_settings
from keeps_auth.domain.ports import EmailSender, LinkMinter
from keeps_auth.domain.verification import LinkIssuer


def build_email_sender(settings: Settings, client: httpx.AsyncClient) -> EmailSender:
    """Select the email sender adapter named by EMAIL_BACKEND."""
    if settings.email_backend == "console":
        return ConsoleEmailSender()
    return ResendEmailSender(client, settings.resend_api_key, settings.email_from)


def build_link_minter(settings: Settings) -> LinkMinter:
    """Select the link minter adapter named by IDENTITY_BACKEND."""
    if settings.identity_backend == "memory":
        return InMemoryIdentityProvider()
    return FirebaseAdminLinkMinter(settings.firebase_service_account)


def build_link_issuer(settings: Settings, client: httpx.AsyncClient) -> LinkIssuer:
    """
    Create the link issuer with injected adapters.

    With the in-memory backend the issuer also subscribes to the
    provider's account-created event, standing in for the hosted trigger.
    """
    minter = build_link_minter(settings)
    issuer = LinkIssuer(
        minter=minter,
        email_sender=build_email_sender(settings, client),
        continue_url=settings.continue_url,
        app_name=settings.app_name,
    )
    if isinstance(minter, InMemoryIdentityProvider):
        minter.on_account_created(issuer.on_account_created)
    return issuer


def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


def get_link_issuer(request: Request) -> LinkIssuer:
    """
    Get link issuer from app state.

    The issuer is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.link_issuer


async def get_email_request(request: Request) -> EmailRequest:
    """
    Parse {email} from the raw body.

    Malformed JSON or a non-object body is treated as {} so callers get
    the endpoint's own "Email is required" error instead of a 422.
    """
    raw = await request.body()
    try:
        body = json.loads(raw or b"{}")
    except ValueError:
        body = {}
    return EmailRequest.from_body(body)
