"""
Helpers for retrieving and refreshing Canvas OAuth tokens.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from canvas_bridge.core.errors import (
    CredentialExpiredNoRefreshError,
    RefreshFailedError,
    UnknownUserError,
)

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from canvas_bridge.clients import CanvasOAuthClient, CredentialStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ValidToken:
    """An access token guaranteed to outlive the refresh buffer."""

    access_token: str
    domain: str
    external_user_id: int


class TokenRefresher:
    """Hands out usable access tokens, refreshing them ahead of expiry."""

    REFRESH_BUFFER = timedelta(minutes=5)

    def __init__(
        self,
        store: "CredentialStore",
        oauth_client: "CanvasOAuthClient",
    ) -> None:
        self._store = store
        self._oauth = oauth_client

    async def ensure_valid_token(self, external_user_id: int) -> ValidToken:
        """Return a token for ``external_user_id``, refreshing it when it is close to expiry."""
        record = self._store.get(external_user_id)
        if record is None:
            raise UnknownUserError(external_user_id)

        now = datetime.now(timezone.utc)
        if record.expires_in(now) > self.REFRESH_BUFFER.total_seconds():
            return ValidToken(
                access_token=record.access_token,
                domain=record.domain,
                external_user_id=record.external_user_id,
            )

        if not record.refresh_token:
            logger.warning(
                "Token expired for canvas user %s and no refresh token is stored",
                external_user_id,
            )
            raise CredentialExpiredNoRefreshError(external_user_id)

        try:
            access_token, expires_in = await self._oauth.refresh_access_token(
                record.domain, record.refresh_token
            )
        except RefreshFailedError as exc:
            logger.error(
                "Token refresh rejected for canvas user %s (status %s)",
                external_user_id,
                exc.upstream_status,
            )
            raise

        expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        self._store.update_tokens(external_user_id, access_token, expires_at)
        logger.info("Refreshed access token for canvas user %s", external_user_id)

        return ValidToken(
            access_token=access_token,
            domain=record.domain,
            external_user_id=record.external_user_id,
        )


__all__ = ["TokenRefresher", "ValidToken"]
