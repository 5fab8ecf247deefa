"""
API v1 routes.

Defines the on-demand verification RPC and the account-created webhook.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from keeps_auth.api.dependencies import get_email_request, get_link_issuer
from keeps_auth.api.models import (
    AcceptedResponse,
    AccountCreatedEvent,
    EmailRequest,
    OkResponse,
    RpcError,
    RpcErrorResponse,
)
from keeps_auth.domain.exceptions import DeliveryError, ValidationError
from keeps_auth.domain.ports import Account
from keeps_auth.domain.verification import LinkIssuer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["v1"])


def _rpc_error(status_code: int, code: str, message: str) -> JSONResponse:
    body = RpcErrorResponse(error=RpcError(code=code, message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post(
    "/resend-verification",
    response_model=OkResponse,
    responses={
        400: {"model": RpcErrorResponse, "description": "Email missing or empty"},
        500: {"model": RpcErrorResponse, "description": "Link minting or delivery failed"},
    },
    summary="Resend a verification email",
    description="Mint a fresh verification link for the address and email it. "
    "Earlier links stay valid until they expire or are used.",
)
async def resend_verification(
    request_data: EmailRequest = Depends(get_email_request),
    issuer: LinkIssuer = Depends(get_link_issuer),
) -> OkResponse | JSONResponse:
    """
    Issue another verification email on demand.

    - **email**: Address of the account to verify
    """
    try:
        await issuer.send_on_demand(request_data.email)
    except ValidationError:
        return _rpc_error(status.HTTP_400_BAD_REQUEST, "invalid-argument", "Email is required.")
    except DeliveryError:
        # Details were logged by the issuer; nothing provider-specific is returned
        return _rpc_error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "internal",
            "Failed to send verification email.",
        )
    return OkResponse()


@router.post(
    "/hooks/account-created",
    response_model=AcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Account-created event hook",
    description="Sends the first verification email for a new account. "
    "Always accepted: email problems never fail account creation.",
)
async def account_created(
    event: AccountCreatedEvent,
    issuer: LinkIssuer = Depends(get_link_issuer),
) -> AcceptedResponse:
    """Run the account-created hook; failures are logged, not returned."""
    if event.email:
        await issuer.on_account_created(
            Account(email=event.email, display_name=event.display_name)
        )
    else:
        logger.info("Account-created event without email ignored")
    return AcceptedResponse()
