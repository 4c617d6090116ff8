"""
Domain models for Canvas credential persistence.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserProfile(BaseModel):
    """Display profile captured during the OAuth handshake."""

    name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None


class UserCredential(BaseModel):
    """Represents the single stored record for a Canvas user."""

    external_user_id: int = Field(..., description="Canvas user id; unique key.")
    domain: str = Field(..., description="Canvas base URL the user authenticated against.")
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: datetime
    profile: UserProfile = Field(default_factory=UserProfile)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def expires_in(self, now: datetime | None = None) -> float:
        """Seconds until the access token expires (negative once expired)."""
        now = now or _utcnow()
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return (expires_at - now).total_seconds()


__all__ = ["UserCredential", "UserProfile"]
