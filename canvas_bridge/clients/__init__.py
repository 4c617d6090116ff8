"""Expose constructed client wrappers."""

from .canvas_api import CanvasAPIClient
from .canvas_oauth import CanvasOAuthClient
from .credential_store import CredentialStore

__all__ = [
    "CanvasAPIClient",
    "CanvasOAuthClient",
    "CredentialStore",
]
