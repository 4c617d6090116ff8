"""Service layer exports."""

from .aggregator import RemoteAggregator, derive_course_status
from .dashboard import ActivityFeed, DashboardComposer, to_dashboard_user
from .oauth_handshake import HandshakeResult, OAuthHandshakeService, OAuthStart
from .session import SessionManager
from .token_cipher import TokenCipherService
from .token_refresher import TokenRefresher, ValidToken

__all__ = [
    "ActivityFeed",
    "DashboardComposer",
    "HandshakeResult",
    "OAuthHandshakeService",
    "OAuthStart",
    "RemoteAggregator",
    "SessionManager",
    "TokenCipherService",
    "TokenRefresher",
    "ValidToken",
    "derive_course_status",
    "to_dashboard_user",
]
