"""
Canvas OAuth handshake: anti-forgery state, code exchange and login.

The flow has two entry points. ``start`` issues a single-use state value that
the browser keeps a copy of while the server keeps another in a short-lived
cookie. ``complete`` validates the callback in a fixed order (payload shape,
state, code exchange, profile fetch, credential upsert, session creation,
state invalidation) and fails closed at the first problem. Once the state
has matched it is invalidated whether or not the sign-in succeeds.
"""

from __future__ import annotations

import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Optional

from fastapi import Response

from canvas_bridge.core.config import OAuthSettings
from canvas_bridge.core.errors import (
    CSRFMismatchError,
    InvalidCallbackError,
    TokenExchangeFailedError,
)
from canvas_bridge.models import UserCredential, UserProfile

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from canvas_bridge.clients import CanvasOAuthClient, CredentialStore
    from canvas_bridge.services.session import SessionManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OAuthStart:
    state: str
    authorization_url: str


@dataclass(frozen=True, slots=True)
class HandshakeResult:
    credential: UserCredential
    display_name: Optional[str]


class OAuthHandshakeService:
    """Orchestrates the authorization-code flow against Canvas."""

    def __init__(
        self,
        oauth_client: "CanvasOAuthClient",
        store: "CredentialStore",
        session_manager: "SessionManager",
        oauth_settings: OAuthSettings,
        *,
        secure_cookies: bool,
    ) -> None:
        self._oauth = oauth_client
        self._store = store
        self._sessions = session_manager
        self._settings = oauth_settings
        self._secure = secure_cookies

    @property
    def state_cookie_name(self) -> str:
        return self._settings.state_cookie_name

    def start(self) -> OAuthStart:
        """Generate a fresh anti-forgery state and the matching consent URL."""
        state = secrets.token_urlsafe(32)
        return OAuthStart(
            state=state,
            authorization_url=self._oauth.build_authorization_url(state),
        )

    def set_state_cookie(self, response: Response, state: str) -> None:
        response.set_cookie(
            key=self.state_cookie_name,
            value=state,
            max_age=self._settings.state_ttl_seconds,
            path="/",
            httponly=True,
            secure=self._secure,
            samesite="lax",
        )

    def clear_state_cookie(self, response: Response) -> None:
        response.delete_cookie(
            key=self.state_cookie_name,
            path="/",
            httponly=True,
            secure=self._secure,
            samesite="lax",
        )

    async def complete(
        self,
        *,
        code: Any,
        state: Any,
        stored_state: Optional[str],
        response: Response,
    ) -> HandshakeResult:
        """Finish the callback and bind a session to the authenticated user."""
        if not code or not isinstance(code, str):
            raise InvalidCallbackError("Missing or invalid authorization code.")
        if not state or not isinstance(state, str):
            raise InvalidCallbackError("Missing OAuth state parameter.")

        if not stored_state or not hmac.compare_digest(
            stored_state.encode("utf-8"), state.encode("utf-8")
        ):
            logger.warning(
                "Security event: OAuth state mismatch on callback (stored state present: %s)",
                bool(stored_state),
            )
            raise CSRFMismatchError("OAuth state mismatch.")

        try:
            return await self._sign_in(code, response)
        finally:
            self.clear_state_cookie(response)

    async def _sign_in(self, code: str, response: Response) -> HandshakeResult:
        try:
            token = await self._oauth.exchange_authorization_code(code)
        except TokenExchangeFailedError as exc:
            logger.error(
                "Token exchange failed (%s): %s %s",
                exc.status_code,
                exc.error,
                exc.description or "",
            )
            raise

        domain = self._oauth.domain
        profile = await self._oauth.fetch_profile(domain, token.access_token)

        now = datetime.now(timezone.utc)
        credential = self._store.upsert(
            UserCredential(
                external_user_id=profile.id,
                domain=domain,
                access_token=token.access_token,
                refresh_token=token.refresh_token,
                expires_at=now + timedelta(seconds=token.expires_in),
                profile=UserProfile(
                    name=profile.name,
                    email=profile.primary_email,
                    avatar_url=profile.avatar_url,
                ),
            )
        )

        self._sessions.create(response, credential.external_user_id)
        logger.info("Canvas user %s signed in", credential.external_user_id)

        display_name = profile.name or (token.user.name if token.user else None)
        return HandshakeResult(credential=credential, display_name=display_name)


__all__ = ["HandshakeResult", "OAuthHandshakeService", "OAuthStart"]
