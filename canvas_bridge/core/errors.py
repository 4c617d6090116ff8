"""
Exception taxonomy shared by the clients, services and HTTP layer.

Each error carries the outward status code it maps to; the FastAPI exception
handlers in ``canvas_bridge.main`` translate them into the consumer contract.
"""

from __future__ import annotations

from http import HTTPStatus


class CanvasBridgeError(Exception):
    """Base exception for canvas-bridge specific errors."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    public_message: str = "An internal error occurred."


class AuthenticationError(CanvasBridgeError):
    """The caller must (re-)authenticate with Canvas."""

    status_code = HTTPStatus.UNAUTHORIZED
    public_message = "Canvas session expired. Please sign in again."


class NotAuthenticatedError(AuthenticationError):
    """No usable session cookie accompanied the request."""

    public_message = "Not authenticated. Please sign in with Canvas."


class UnknownUserError(AuthenticationError):
    """The session refers to a user with no stored credential."""

    def __init__(self, external_user_id: int) -> None:
        super().__init__(f"No credential stored for canvas user {external_user_id}.")
        self.external_user_id = external_user_id


class CredentialExpiredNoRefreshError(AuthenticationError):
    """The access token expired and no refresh token is on record."""

    def __init__(self, external_user_id: int) -> None:
        super().__init__(
            f"Token expired and no refresh token available for canvas user {external_user_id}."
        )
        self.external_user_id = external_user_id


class RefreshFailedError(AuthenticationError):
    """The token endpoint rejected a refresh-grant request."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Canvas token refresh failed ({status_code}): {body[:200]}")
        self.upstream_status = status_code
        self.body = body


class UpstreamRejectedError(AuthenticationError):
    """Canvas answered 401: the credential has been revoked."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Canvas API returned 401 on {path}; token may have been revoked.")
        self.path = path


class CSRFMismatchError(CanvasBridgeError):
    """The OAuth callback state does not match the stored anti-forgery value."""

    status_code = HTTPStatus.FORBIDDEN
    public_message = "OAuth state mismatch. Please try logging in again."


class InvalidCallbackError(CanvasBridgeError):
    """The OAuth callback payload is missing or malformed."""

    status_code = HTTPStatus.BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.public_message = message


class TokenExchangeFailedError(CanvasBridgeError):
    """Canvas refused to exchange an authorization code."""

    def __init__(self, status_code: int, error: str, description: str | None = None) -> None:
        super().__init__(f"Token exchange failed ({status_code}): {error} {description or ''}".strip())
        self.status_code = status_code
        self.error = error
        self.description = description
        self.public_message = description or "Token exchange failed."


class InfrastructureError(CanvasBridgeError):
    """Unexpected failure of a collaborator; surfaced as a generic 500."""


class UpstreamError(InfrastructureError):
    """Canvas answered with a non-2xx status other than 401."""

    def __init__(self, status_code: int, path: str, body: str = "") -> None:
        super().__init__(f"Canvas API {status_code} on {path}: {body[:200]}")
        self.upstream_status = status_code
        self.path = path


class PayloadValidationError(InfrastructureError):
    """A Canvas payload did not match the expected schema."""


__all__ = [
    "AuthenticationError",
    "CSRFMismatchError",
    "CanvasBridgeError",
    "CredentialExpiredNoRefreshError",
    "InfrastructureError",
    "InvalidCallbackError",
    "NotAuthenticatedError",
    "PayloadValidationError",
    "RefreshFailedError",
    "TokenExchangeFailedError",
    "UnknownUserError",
    "UpstreamError",
    "UpstreamRejectedError",
]
