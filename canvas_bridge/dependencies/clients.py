"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache

from canvas_bridge.clients import CanvasAPIClient, CanvasOAuthClient, CredentialStore
from canvas_bridge.core.config import get_settings
from canvas_bridge.services import (
    ActivityFeed,
    DashboardComposer,
    OAuthHandshakeService,
    RemoteAggregator,
    SessionManager,
    TokenCipherService,
    TokenRefresher,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_token_cipher_service() -> TokenCipherService:
    """Provide symmetric encryption helper for token storage."""
    settings = _settings()
    secret = settings.security.token_encryption_secret or settings.canvas.client_secret
    return TokenCipherService(secret=secret)


@lru_cache()
def get_credential_store() -> CredentialStore:
    """Provide the shared SQLite credential store."""
    settings = _settings()
    return CredentialStore(settings.credential_db_path, get_token_cipher_service())


@lru_cache()
def get_canvas_oauth_client() -> CanvasOAuthClient:
    """Create a singleton Canvas OAuth client."""
    return CanvasOAuthClient(_settings().canvas)


@lru_cache()
def get_canvas_api_client() -> CanvasAPIClient:
    """Create a singleton Canvas REST client."""
    return CanvasAPIClient(_settings().canvas)


@lru_cache()
def get_session_manager() -> SessionManager:
    """Provide the encrypted cookie session manager."""
    settings = _settings()
    return SessionManager(
        TokenCipherService(secret=settings.session.secret),
        settings.session,
        secure=settings.is_production,
    )


def get_token_refresher() -> TokenRefresher:
    """Build a token refresher bound to the credential store."""
    return TokenRefresher(
        store=get_credential_store(),
        oauth_client=get_canvas_oauth_client(),
    )


def get_oauth_handshake_service() -> OAuthHandshakeService:
    """Build the OAuth handshake orchestrator."""
    settings = _settings()
    return OAuthHandshakeService(
        oauth_client=get_canvas_oauth_client(),
        store=get_credential_store(),
        session_manager=get_session_manager(),
        oauth_settings=settings.oauth,
        secure_cookies=settings.is_production,
    )


def get_remote_aggregator() -> RemoteAggregator:
    """Build the course/quiz aggregator."""
    return RemoteAggregator(
        get_canvas_api_client(),
        source_timeout=_settings().canvas.source_timeout_seconds,
    )


@lru_cache()
def get_activity_feed() -> ActivityFeed:
    return ActivityFeed()


def get_dashboard_composer() -> DashboardComposer:
    """Build the dashboard composer from the shared collaborators."""
    return DashboardComposer(
        store=get_credential_store(),
        refresher=get_token_refresher(),
        aggregator=get_remote_aggregator(),
        activity_feed=get_activity_feed(),
    )


__all__ = [
    "get_activity_feed",
    "get_canvas_api_client",
    "get_canvas_oauth_client",
    "get_credential_store",
    "get_dashboard_composer",
    "get_oauth_handshake_service",
    "get_remote_aggregator",
    "get_session_manager",
    "get_token_cipher_service",
    "get_token_refresher",
]
