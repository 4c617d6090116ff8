"""SQLite-backed store for the single credential record kept per Canvas user."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from canvas_bridge.core.errors import UnknownUserError
from canvas_bridge.models import UserCredential, UserProfile
from canvas_bridge.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)


def _ensure_directory(db_path: Path) -> None:
    if db_path.parent and not db_path.parent.exists():
        db_path.parent.mkdir(parents=True, exist_ok=True)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CredentialStore:
    """
    One ``UserCredential`` row per Canvas user id.

    Tokens are encrypted at rest. Callers only get whole-row upserts and the
    narrow ``update_tokens`` write; there is no read-modify-write path.
    Database errors propagate unchanged.
    """

    def __init__(self, db_path: str, token_cipher: TokenCipherService) -> None:
        self._db_path = Path(db_path)
        self._cipher = token_cipher
        _ensure_directory(self._db_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    canvas_user_id INTEGER PRIMARY KEY,
                    canvas_domain TEXT NOT NULL,
                    access_token_encrypted TEXT NOT NULL,
                    refresh_token_encrypted TEXT,
                    token_expires_at TEXT NOT NULL,
                    name TEXT,
                    email TEXT,
                    avatar_url TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )

    def get(self, external_user_id: int) -> Optional[UserCredential]:
        """Return the stored credential, or ``None`` when the user is unknown."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE canvas_user_id = ?",
                (external_user_id,),
            ).fetchone()
        if not row:
            return None
        return self._row_to_credential(row)

    def upsert(self, record: UserCredential) -> UserCredential:
        """
        Insert or update the row keyed by ``record.external_user_id``.

        Token fields and the domain are replaced wholesale; profile fields are
        only replaced when the incoming value is set. ``created_at`` survives
        updates.
        """
        now = datetime.now(timezone.utc).isoformat()
        refresh_encrypted = (
            self._cipher.encrypt(record.refresh_token) if record.refresh_token else None
        )
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO users (
                    canvas_user_id,
                    canvas_domain,
                    access_token_encrypted,
                    refresh_token_encrypted,
                    token_expires_at,
                    name,
                    email,
                    avatar_url,
                    created_at,
                    updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(canvas_user_id) DO UPDATE SET
                    canvas_domain = excluded.canvas_domain,
                    access_token_encrypted = excluded.access_token_encrypted,
                    refresh_token_encrypted = excluded.refresh_token_encrypted,
                    token_expires_at = excluded.token_expires_at,
                    name = COALESCE(excluded.name, users.name),
                    email = COALESCE(excluded.email, users.email),
                    avatar_url = COALESCE(excluded.avatar_url, users.avatar_url),
                    updated_at = excluded.updated_at
                """,
                (
                    record.external_user_id,
                    record.domain,
                    self._cipher.encrypt(record.access_token),
                    refresh_encrypted,
                    _as_utc(record.expires_at).isoformat(),
                    record.profile.name,
                    record.profile.email,
                    record.profile.avatar_url,
                    now,
                    now,
                ),
            )
        stored = self.get(record.external_user_id)
        if stored is None:  # pragma: no cover - row was just written
            raise UnknownUserError(record.external_user_id)
        logger.info("Stored credential for canvas user %s", record.external_user_id)
        return stored

    def update_tokens(
        self, external_user_id: int, access_token: str, expires_at: datetime
    ) -> None:
        """Replace the access token and expiry only; profile and refresh token are untouched."""
        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE users
                SET access_token_encrypted = ?,
                    token_expires_at = ?,
                    updated_at = ?
                WHERE canvas_user_id = ?
                """,
                (
                    self._cipher.encrypt(access_token),
                    _as_utc(expires_at).isoformat(),
                    datetime.now(timezone.utc).isoformat(),
                    external_user_id,
                ),
            )
        if cursor.rowcount == 0:
            raise UnknownUserError(external_user_id)

    def _row_to_credential(self, row: sqlite3.Row) -> UserCredential:
        refresh_encrypted = row["refresh_token_encrypted"]
        return UserCredential(
            external_user_id=row["canvas_user_id"],
            domain=row["canvas_domain"],
            access_token=self._cipher.decrypt(row["access_token_encrypted"]),
            refresh_token=(
                self._cipher.decrypt(refresh_encrypted) if refresh_encrypted else None
            ),
            expires_at=datetime.fromisoformat(row["token_expires_at"]),
            profile=UserProfile(
                name=row["name"],
                email=row["email"],
                avatar_url=row["avatar_url"],
            ),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


__all__ = ["CredentialStore"]
