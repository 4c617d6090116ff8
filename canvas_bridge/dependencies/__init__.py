"""Expose dependency helpers for FastAPI routers."""

from .auth import get_current_user_id
from .clients import (
    get_activity_feed,
    get_canvas_api_client,
    get_canvas_oauth_client,
    get_credential_store,
    get_dashboard_composer,
    get_oauth_handshake_service,
    get_remote_aggregator,
    get_session_manager,
    get_token_cipher_service,
    get_token_refresher,
)
from .config import get_app_settings

__all__ = [
    "get_activity_feed",
    "get_app_settings",
    "get_canvas_api_client",
    "get_canvas_oauth_client",
    "get_credential_store",
    "get_current_user_id",
    "get_dashboard_composer",
    "get_oauth_handshake_service",
    "get_remote_aggregator",
    "get_session_manager",
    "get_token_cipher_service",
    "get_token_refresher",
]
