"""Session-backed authentication dependencies."""

from typing import Annotated

from fastapi import Depends, Request

from canvas_bridge.core.errors import NotAuthenticatedError
from canvas_bridge.services import SessionManager

from .clients import get_session_manager


def get_current_user_id(
    request: Request,
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> int:
    """Resolve the Canvas user id from the session cookie or reject with 401."""
    external_user_id = sessions.read(request)
    if external_user_id is None:
        raise NotAuthenticatedError("No valid session cookie.")
    return external_user_id


__all__ = ["get_current_user_id"]
