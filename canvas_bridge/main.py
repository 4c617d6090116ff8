"""
FastAPI application entrypoint for the Canvas bridge.
"""

from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from canvas_bridge.api.routes import router as api_router
from canvas_bridge.core.config import get_settings
from canvas_bridge.core.errors import (
    AuthenticationError,
    CanvasBridgeError,
    InfrastructureError,
    NotAuthenticatedError,
)
from canvas_bridge.core.logging import configure_logging

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _expire_oauth_state(request: Request, response: Response) -> None:
    """Invalidate the anti-forgery state if the failing request was a callback."""
    handshake = getattr(request.state, "oauth_handshake", None)
    if handshake is not None:
        handshake.clear_state_cookie(response)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(CanvasBridgeError)
    async def canvas_bridge_error_handler(
        request: Request, exc: CanvasBridgeError
    ) -> JSONResponse:
        if isinstance(exc, AuthenticationError) and not isinstance(
            exc, NotAuthenticatedError
        ):
            logger.warning(
                "Re-authentication required on %s (%s): %s",
                request.url.path,
                type(exc).__name__,
                exc,
            )
        elif isinstance(exc, InfrastructureError):
            logger.error(
                "Infrastructure failure on %s %s: %s",
                request.method,
                request.url.path,
                exc,
                exc_info=exc,
            )

        response = _error_response(int(exc.status_code), exc.public_message)
        _expire_oauth_state(request, response)
        return response

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error_response(HTTPStatus.BAD_REQUEST, "Invalid request payload.")

    @app.middleware("http")
    async def infrastructure_boundary(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:  # pylint: disable=broad-except
            logger.exception(
                "Unhandled exception on %s %s", request.method, request.url.path
            )
            response = _error_response(
                HTTPStatus.INTERNAL_SERVER_ERROR, "An internal error occurred."
            )
            _expire_oauth_state(request, response)
            return response


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Canvas Bridge",
        version="0.1.0",
        description="Canvas OAuth sessions and course/quiz aggregation for the SEB dashboard.",
    )
    _register_error_handlers(app)
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
