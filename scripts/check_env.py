"""Validate the bridge's configuration before deploying or restarting it.

The tool loads ``AppSettings`` from the given ``.env`` file, so missing or
malformed Canvas, session and storage settings surface before the service
starts rejecting requests. It then audits the loaded values for combinations
that are valid but unsafe, such as serving production traffic against a
plain-HTTP Canvas instance or reusing the session secret for stored tokens.

Example usage::

    python -m scripts.check_env --env-file /srv/canvas-bridge/.env --strict
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from canvas_bridge.core.config import AppSettings, _load_env_file

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_AUDIT_WARNING = 4
EXIT_RUNTIME_ERROR = 5


def load_settings(env_file: Path) -> AppSettings:
    """Load ``env_file`` into the environment and build ``AppSettings`` from it."""
    if not env_file.exists():
        raise FileNotFoundError(
            f"Environment file {env_file} does not exist. "
            "Ensure the path is correct or create it before running this tool."
        )
    _load_env_file(str(env_file))
    return AppSettings()  # type: ignore[call-arg]


def audit_settings(settings: AppSettings) -> list[str]:
    """Return human-readable warnings for risky but loadable settings."""
    warnings: list[str] = []
    token_secret = settings.security.token_encryption_secret
    if token_secret and token_secret == settings.session.secret:
        warnings.append(
            "TOKEN_ENCRYPTION_SECRET equals SESSION_SECRET; rotating the session "
            "key would make stored Canvas tokens unreadable."
        )
    if not token_secret:
        warnings.append(
            "TOKEN_ENCRYPTION_SECRET is unset; stored tokens are encrypted with "
            "the Canvas client secret."
        )
    if settings.is_production:
        if not settings.canvas.base_url.startswith("https://"):
            warnings.append("CANVAS_BASE_URL must use https in production.")
        if str(settings.canvas.redirect_uri).startswith("http://"):
            warnings.append("CANVAS_REDIRECT_URI must use https in production.")
    return warnings


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate and audit canvas-bridge settings."
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        type=Path,
        help="Path to the environment file (default: .env in the repo root).",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit non-zero when the audit reports any warning.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        settings = load_settings(args.env_file)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR

    warnings = audit_settings(settings)
    for warning in warnings:
        print(f"warning: {warning}", file=sys.stderr)
    if warnings and args.strict:
        return EXIT_AUDIT_WARNING

    print(f"Settings OK for environment '{settings.environment}'.")
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
