"""
API routes - Browser-facing verification endpoint.

This module defines POST /send-verification, called cross-origin by the
web client. CORS is limited to the single configured origin and is
answered by hand so pre-flight gets a bare 200.
"""

import logging

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse

from keeps_auth.api.dependencies import get_app_settings, get_email_request, get_link_issuer
from keeps_auth.api.models import EmailRequest, ErrorResponse, OkResponse
from keeps_auth.config.settings import Settings
from keeps_auth.domain.exceptions import DeliveryError, ValidationError
from keeps_auth.domain.verification import LinkIssuer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["verification"])

SEND_VERIFICATION_PATH = "/send-verification"


def cors_headers(settings: Settings) -> dict[str, str]:
    """CORS headers for the single allowed origin."""
    return {
        "Access-Control-Allow-Origin": settings.cors_allow_origin,
        "Access-Control-Allow-Methods": "POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }


@router.options(SEND_VERIFICATION_PATH, include_in_schema=False)
async def send_verification_preflight(
    settings: Settings = Depends(get_app_settings),
) -> Response:
    """Answer CORS pre-flight with 200 and no body."""
    return Response(status_code=status.HTTP_200_OK, headers=cors_headers(settings))


@router.api_route(
    SEND_VERIFICATION_PATH,
    methods=["GET", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def send_verification_not_allowed(
    settings: Settings = Depends(get_app_settings),
) -> Response:
    """Reject anything but POST (and pre-flight)."""
    return PlainTextResponse(
        "Method Not Allowed",
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        headers={**cors_headers(settings), "Allow": "POST, OPTIONS"},
    )


@router.post(
    SEND_VERIFICATION_PATH,
    response_model=OkResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Email is required"},
        500: {"model": ErrorResponse, "description": "Failed to send verification email"},
    },
    summary="Send a verification email",
    description="Mint a verification link for the address and email it.",
)
async def send_verification(
    request_data: EmailRequest = Depends(get_email_request),
    issuer: LinkIssuer = Depends(get_link_issuer),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    """
    Send a verification email.

    - **email**: Address of the account to verify
    """
    headers = cors_headers(settings)
    try:
        await issuer.send_on_demand(request_data.email)
    except ValidationError:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(error="Email is required").model_dump(),
            headers=headers,
        )
    except DeliveryError:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error="Failed to send verification email").model_dump(),
            headers=headers,
        )
    return JSONResponse(content=OkResponse().model_dump(), headers=headers)
