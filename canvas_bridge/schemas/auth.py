"""Schemas related to OAuth flows."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class OAuthCallbackPayload(BaseModel):
    """Payload sent to complete the OAuth callback exchange.

    Fields are left untyped; the handshake service validates them.
    """

    code: Any = Field(None, description="Authorization code returned by Canvas.")
    state: Any = Field(None, description="Anti-forgery state issued when starting OAuth.")


class AuthorizeResponse(BaseModel):
    authorization_url: str
    state: str


class CallbackUser(BaseModel):
    id: int
    name: Optional[str] = None


class CallbackResponse(BaseModel):
    success: bool = True
    user: CallbackUser


__all__ = [
    "AuthorizeResponse",
    "CallbackResponse",
    "CallbackUser",
    "OAuthCallbackPayload",
]
