"""Encrypted cookie sessions that carry nothing but the Canvas user id."""

from __future__ import annotations

import json
from typing import Optional

from fastapi import Request, Response

from canvas_bridge.core.config import SessionSettings
from canvas_bridge.services.token_cipher import TokenCipherService


class SessionManager:
    """
    Map the opaque session cookie to a Canvas user id.

    There is no server-side session table. A cookie that is absent, malformed,
    expired or encrypted under a rotated key reads as unauthenticated.
    """

    def __init__(
        self,
        cipher: TokenCipherService,
        settings: SessionSettings,
        *,
        secure: bool,
    ) -> None:
        self._cipher = cipher
        self._settings = settings
        self._secure = secure

    @property
    def cookie_name(self) -> str:
        return self._settings.cookie_name

    def encode(self, external_user_id: int) -> str:
        return self._cipher.encrypt(json.dumps({"uid": external_user_id}))

    def decode(self, raw: str | None) -> Optional[int]:
        """Return the user id inside ``raw`` or ``None``; never raises."""
        if not raw:
            return None
        try:
            payload = json.loads(self._cipher.decrypt(raw, ttl=self._settings.ttl_seconds))
        except ValueError:
            return None
        if not isinstance(payload, dict):
            return None
        uid = payload.get("uid")
        if isinstance(uid, bool) or not isinstance(uid, int):
            return None
        return uid

    def read(self, request: Request) -> Optional[int]:
        return self.decode(request.cookies.get(self.cookie_name))

    def create(self, response: Response, external_user_id: int) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=self.encode(external_user_id),
            max_age=self._settings.ttl_seconds,
            path="/",
            httponly=True,
            secure=self._secure,
            samesite="lax",
        )

    def destroy(self, response: Response) -> None:
        response.delete_cookie(
            key=self.cookie_name,
            path="/",
            httponly=True,
            secure=self._secure,
            samesite="lax",
        )


__all__ = ["SessionManager"]
