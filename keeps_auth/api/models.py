"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


class EmailRequest(BaseModel):
    """
    Request body carrying the address to send a verification link to.

    Parsing is tolerant: a missing, null or non-string email becomes an
    empty string so the endpoint can answer with its own 400 error.
    """

    email: str = Field("", description="Recipient email address")

    @field_validator("email", mode="before")
    @classmethod
    def coerce_email(cls, value: Any) -> str:
        if value is None or isinstance(value, dict | list):
            return ""
        return str(value).strip().lower()

    @classmethod
    def from_body(cls, body: Any) -> "EmailRequest":
        """Build from an already-decoded JSON body of any shape."""
        return cls.model_validate(body if isinstance(body, dict) else {})


class OkResponse(BaseModel):
    """Response model for a delivered verification email."""

    ok: bool = True


class ErrorResponse(BaseModel):
    """Error body of POST /send-verification."""

    error: str


class RpcError(BaseModel):
    """Structured error of the on-demand RPC call."""

    code: Literal["invalid-argument", "internal"]
    message: str


class RpcErrorResponse(BaseModel):
    """Error body of POST /v1/resend-verification."""

    error: RpcError


class AccountCreatedEvent(BaseModel):
    """Account-creation event delivered by the identity provider."""

    email: str | None = None
    display_name: str | None = Field(None, alias="displayName")

    model_config = {"populate_by_name": True}


class AcceptedResponse(BaseModel):
    """Response model for an accepted webhook event."""

    accepted: bool = True
