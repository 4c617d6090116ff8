"""Pytest configuration shared across the suite."""

from __future__ import annotations

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from canvas_bridge.clients import CredentialStore
from canvas_bridge.services import TokenCipherService


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


@pytest.fixture
def token_cipher() -> TokenCipherService:
    return TokenCipherService(secret="store-secret")


@pytest.fixture
def credential_store(tmp_path, token_cipher) -> CredentialStore:
    return CredentialStore(str(tmp_path / "credentials.db"), token_cipher)
