"""Tests for the environment drift detection script."""

from __future__ import annotations

from pathlib import Path

import pytest

from canvas_bridge.core.config import AppSettings, CanvasSettings, SecuritySettings, SessionSettings
from scripts import check_env

MANAGED_ENV_KEYS = [
    "APP_ENV",
    "CANVAS_BASE_URL",
    "CANVAS_CLIENT_ID",
    "CANVAS_CLIENT_SECRET",
    "CANVAS_REDIRECT_URI",
    "SESSION_SECRET",
    "TOKEN_ENCRYPTION_SECRET",
]

VALID_ENV = {
    "CANVAS_BASE_URL": "https://canvas.example.edu",
    "CANVAS_CLIENT_ID": "10000000000001",
    "CANVAS_CLIENT_SECRET": "client-secret",
    "CANVAS_REDIRECT_URI": "https://app.example.edu/oauth/callback",
    "SESSION_SECRET": "0123456789abcdef0123456789abcdef",
    "TOKEN_ENCRYPTION_SECRET": "token-secret",
}


def _write_env(env_path: Path, **values: str) -> None:
    contents = "\n".join(f"{key}={value}" for key, value in values.items())
    env_path.write_text(contents + "\n", encoding="utf-8")


def _clear_managed_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in MANAGED_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_main_requires_existing_env_file(tmp_path: Path) -> None:
    exit_code = check_env.main(["--env-file", str(tmp_path / ".missing-env")])
    assert exit_code == check_env.EXIT_RUNTIME_ERROR


def test_valid_env_file_passes(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    env_file = tmp_path / ".env"
    _clear_managed_env(monkeypatch)
    _write_env(env_file, **VALID_ENV)

    exit_code = check_env.main(["--env-file", str(env_file), "--strict"])

    assert exit_code == check_env.EXIT_OK
    captured = capsys.readouterr()
    assert "Settings OK" in captured.out
    assert "warning:" not in captured.err


def test_audit_warnings_fail_only_in_strict_mode(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    env_file = tmp_path / ".env"
    values = {k: v for k, v in VALID_ENV.items() if k != "TOKEN_ENCRYPTION_SECRET"}
    _clear_managed_env(monkeypatch)
    _write_env(env_file, **values)

    assert check_env.main(["--env-file", str(env_file)]) == check_env.EXIT_OK
    assert "TOKEN_ENCRYPTION_SECRET is unset" in capsys.readouterr().err

    _clear_managed_env(monkeypatch)
    exit_code = check_env.main(["--env-file", str(env_file), "--strict"])
    assert exit_code == check_env.EXIT_AUDIT_WARNING


@pytest.mark.parametrize(
    "overrides",
    [
        {"CANVAS_CLIENT_SECRET": None},
        {"SESSION_SECRET": "too-short"},
        {"CANVAS_BASE_URL": "canvas.example.edu"},
    ],
)
def test_validation_failure_for_missing_or_invalid_values(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, overrides: dict
) -> None:
    env_file = tmp_path / ".env"

    values = {**VALID_ENV, **overrides}
    _clear_managed_env(monkeypatch)
    _write_env(env_file, **{key: value for key, value in values.items() if value is not None})

    exit_code = check_env.main(["--env-file", str(env_file)])
    assert exit_code == check_env.EXIT_VALIDATION_ERROR


def _settings(**overrides: str) -> AppSettings:
    canvas = {
        "CANVAS_BASE_URL": "https://canvas.example.edu",
        "CANVAS_CLIENT_ID": "cid",
        "CANVAS_CLIENT_SECRET": "csecret",
        "CANVAS_REDIRECT_URI": "https://app.example.edu/oauth/callback",
    }
    canvas.update({key: value for key, value in overrides.items() if key.startswith("CANVAS_")})
    session_secret = overrides.get("SESSION_SECRET", "s" * 32)
    return AppSettings(
        APP_ENV=overrides.get("APP_ENV", "development"),
        canvas=CanvasSettings(**canvas),
        session=SessionSettings(SESSION_SECRET=session_secret),
        security=SecuritySettings(
            TOKEN_ENCRYPTION_SECRET=overrides.get("TOKEN_ENCRYPTION_SECRET")
        ),
    )


def test_audit_accepts_sane_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_managed_env(monkeypatch)
    assert check_env.audit_settings(_settings(TOKEN_ENCRYPTION_SECRET="other")) == []


def test_audit_flags_shared_and_missing_token_secret(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _clear_managed_env(monkeypatch)
    shared = check_env.audit_settings(_settings(TOKEN_ENCRYPTION_SECRET="s" * 32))
    missing = check_env.audit_settings(_settings())

    assert any("equals SESSION_SECRET" in warning for warning in shared)
    assert any("TOKEN_ENCRYPTION_SECRET is unset" in warning for warning in missing)


def test_audit_requires_https_in_production(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_managed_env(monkeypatch)
    warnings = check_env.audit_settings(
        _settings(
            APP_ENV="production",
            TOKEN_ENCRYPTION_SECRET="other",
            CANVAS_BASE_URL="http://canvas.internal",
            CANVAS_REDIRECT_URI="http://app.internal/oauth/callback",
        )
    )

    assert len(warnings) == 2
