"""Domain models."""

from .credential import UserCredential, UserProfile

__all__ = ["UserCredential", "UserProfile"]
