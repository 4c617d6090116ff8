"""Test helper that normalizes sys.path and environment defaults."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


_DEFAULT_ENV_VARS: dict[str, str] = {
    "CANVAS_BASE_URL": "https://canvas.example.edu",
    "CANVAS_CLIENT_ID": "test-client-id",
    "CANVAS_CLIENT_SECRET": "test-client-secret",
    "CANVAS_REDIRECT_URI": "https://app.example.edu/oauth/callback",
    "SESSION_SECRET": "test-session-secret-0123456789abcdef",
    "TOKEN_ENCRYPTION_SECRET": "test-token-secret",
    "CREDENTIAL_DB_PATH": str(Path(tempfile.gettempdir()) / "canvas-bridge-tests.db"),
}

for key, value in _DEFAULT_ENV_VARS.items():
    os.environ.setdefault(key, value)
