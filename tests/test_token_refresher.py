from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from canvas_bridge.core.errors import (
    CredentialExpiredNoRefreshError,
    RefreshFailedError,
    UnknownUserError,
)
from canvas_bridge.models import UserCredential
from canvas_bridge.services.token_refresher import TokenRefresher


class DummyOAuthClient:
    def __init__(self, *, refreshed_token: str = "refreshed-access", fail_with: int | None = None) -> None:
        self.refreshed_token = refreshed_token
        self.fail_with = fail_with
        self.calls: list[tuple[str, str]] = []

    async def refresh_access_token(self, domain: str, refresh_token: str) -> tuple[str, int]:
        self.calls.append((domain, refresh_token))
        if self.fail_with is not None:
            raise RefreshFailedError(self.fail_with, '{"error":"invalid_grant"}')
        return self.refreshed_token, 3600


def _store_credential(store, *, expires_in: timedelta, refresh_token: str | None = "refresh-token"):
    return store.upsert(
        UserCredential(
            external_user_id=123,
            domain="https://canvas.example.edu",
            access_token="initial-token",
            refresh_token=refresh_token,
            expires_at=datetime.now(timezone.utc) + expires_in,
        )
    )


@pytest.mark.asyncio
async def test_fresh_token_is_returned_without_network(credential_store) -> None:
    oauth_client = DummyOAuthClient()
    _store_credential(credential_store, expires_in=timedelta(minutes=30))
    refresher = TokenRefresher(credential_store, oauth_client)

    token = await refresher.ensure_valid_token(123)

    assert token.access_token == "initial-token"
    assert token.domain == "https://canvas.example.edu"
    assert token.external_user_id == 123
    assert oauth_client.calls == []


@pytest.mark.asyncio
async def test_token_inside_buffer_is_refreshed_and_persisted(credential_store) -> None:
    oauth_client = DummyOAuthClient()
    before = _store_credential(credential_store, expires_in=timedelta(minutes=4))
    refresher = TokenRefresher(credential_store, oauth_client)

    token = await refresher.ensure_valid_token(123)

    assert token.access_token == "refreshed-access"
    assert oauth_client.calls == [("https://canvas.example.edu", "refresh-token")]

    stored = credential_store.get(123)
    assert stored is not None
    assert stored.access_token == "refreshed-access"
    assert stored.expires_at > before.expires_at
    assert stored.refresh_token == "refresh-token"


@pytest.mark.asyncio
async def test_expired_token_is_refreshed(credential_store) -> None:
    oauth_client = DummyOAuthClient()
    _store_credential(credential_store, expires_in=timedelta(minutes=-10))
    refresher = TokenRefresher(credential_store, oauth_client)

    token = await refresher.ensure_valid_token(123)

    assert token.access_token == "refreshed-access"
    assert len(oauth_client.calls) == 1


@pytest.mark.asyncio
async def test_expired_without_refresh_token_fails_without_network(credential_store) -> None:
    oauth_client = DummyOAuthClient()
    _store_credential(
        credential_store, expires_in=timedelta(minutes=-1), refresh_token=None
    )
    refresher = TokenRefresher(credential_store, oauth_client)

    with pytest.raises(CredentialExpiredNoRefreshError):
        await refresher.ensure_valid_token(123)
    assert oauth_client.calls == []


@pytest.mark.asyncio
async def test_unknown_user_fails(credential_store) -> None:
    refresher = TokenRefresher(credential_store, DummyOAuthClient())

    with pytest.raises(UnknownUserError):
        await refresher.ensure_valid_token(404)


@pytest.mark.asyncio
async def test_rejected_refresh_is_reported_and_not_retried(credential_store) -> None:
    oauth_client = DummyOAuthClient(fail_with=400)
    _store_credential(credential_store, expires_in=timedelta(minutes=1))
    refresher = TokenRefresher(credential_store, oauth_client)

    with pytest.raises(RefreshFailedError) as excinfo:
        await refresher.ensure_valid_token(123)

    assert excinfo.value.upstream_status == 400
    assert "invalid_grant" in excinfo.value.body
    assert len(oauth_client.calls) == 1
    stored = credential_store.get(123)
    assert stored is not None
    assert stored.access_token == "initial-token"
