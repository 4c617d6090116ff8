"""
Canvas OAuth utilities.

These helpers manage the authorization-code exchange, the refresh-grant
lifecycle and the profile lookup that follows a successful login.
"""

from __future__ import annotations

import logging
from typing import Tuple
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from canvas_bridge.core.config import CanvasSettings
from canvas_bridge.core.errors import (
    InfrastructureError,
    PayloadValidationError,
    RefreshFailedError,
    TokenExchangeFailedError,
    UpstreamError,
    UpstreamRejectedError,
)
from canvas_bridge.schemas.canvas import (
    CanvasErrorResponse,
    CanvasProfile,
    CanvasRefreshResponse,
    CanvasTokenResponse,
)

logger = logging.getLogger(__name__)


class CanvasOAuthClient:
    """Build Canvas authorization URLs and talk to the token endpoint."""

    AUTHORIZE_PATH = "/login/oauth2/auth"
    TOKEN_PATH = "/login/oauth2/token"
    PROFILE_PATH = "/api/v1/users/self/profile"

    def __init__(
        self,
        canvas_settings: CanvasSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._canvas = canvas_settings
        self._transport = transport

    @property
    def domain(self) -> str:
        return self._canvas.base_url

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._canvas.request_timeout_seconds,
            transport=self._transport,
        )

    def build_authorization_url(self, state: str) -> str:
        """Construct the Canvas consent URL."""
        params = {
            "client_id": self._canvas.client_id,
            "response_type": "code",
            "redirect_uri": str(self._canvas.redirect_uri),
            "state": state,
        }
        return f"{self._canvas.base_url}{self.AUTHORIZE_PATH}?{urlencode(params)}"

    async def exchange_authorization_code(self, code: str) -> CanvasTokenResponse:
        """Exchange an authorization code for an access/refresh token pair."""
        payload = {
            "grant_type": "authorization_code",
            "client_id": self._canvas.client_id,
            "client_secret": self._canvas.client_secret,
            "redirect_uri": str(self._canvas.redirect_uri),
            "code": code,
        }
        response = await self._post_token(self._canvas.base_url, payload)

        if not response.is_success:
            error = _parse_error(response)
            raise TokenExchangeFailedError(
                response.status_code, error.error, error.error_description
            )

        try:
            return CanvasTokenResponse.model_validate(response.json())
        except (ValidationError, ValueError) as exc:
            raise PayloadValidationError(
                "Incomplete token payload returned from Canvas."
            ) from exc

    async def refresh_access_token(self, domain: str, refresh_token: str) -> Tuple[str, int]:
        """
        Mint a new access token with a stored refresh token.

        Returns a tuple of (access_token, expires_in_seconds).
        """
        payload = {
            "grant_type": "refresh_token",
            "client_id": self._canvas.client_id,
            "client_secret": self._canvas.client_secret,
            "refresh_token": refresh_token,
        }
        response = await self._post_token(domain, payload)

        if not response.is_success:
            raise RefreshFailedError(response.status_code, response.text)

        try:
            token = CanvasRefreshResponse.model_validate(response.json())
        except (ValidationError, ValueError) as exc:
            raise PayloadValidationError(
                "Incomplete refresh payload returned from Canvas."
            ) from exc
        return token.access_token, token.expires_in

    async def fetch_profile(self, domain: str, access_token: str) -> CanvasProfile:
        """Fetch the canonical profile of the user owning ``access_token``."""
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
        }
        try:
            async with self._client() as client:
                response = await client.get(f"{domain}{self.PROFILE_PATH}", headers=headers)
        except httpx.HTTPError as exc:
            raise InfrastructureError(f"Canvas profile request failed: {exc}") from exc

        if response.status_code == httpx.codes.UNAUTHORIZED:
            raise UpstreamRejectedError(self.PROFILE_PATH)
        if not response.is_success:
            raise UpstreamError(response.status_code, self.PROFILE_PATH, response.text)

        try:
            return CanvasProfile.model_validate(response.json())
        except (ValidationError, ValueError) as exc:
            raise PayloadValidationError("Unexpected Canvas profile payload.") from exc

    async def _post_token(self, domain: str, payload: dict[str, str]) -> httpx.Response:
        try:
            async with self._client() as client:
                return await client.post(f"{domain}{self.TOKEN_PATH}", data=payload)
        except httpx.HTTPError as exc:
            raise InfrastructureError(f"Canvas token endpoint unreachable: {exc}") from exc


def _parse_error(response: httpx.Response) -> CanvasErrorResponse:
    try:
        return CanvasErrorResponse.model_validate(response.json())
    except (ValidationError, ValueError):
        return CanvasErrorResponse(
            error="unknown_error",
            error_description="Canvas returned a non-OK response.",
        )


__all__ = ["CanvasOAuthClient"]
