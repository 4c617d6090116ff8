"""
FastAPI routes consumed by the dashboard front-end.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse

from canvas_bridge.clients import CredentialStore
from canvas_bridge.core.config import AppSettings
from canvas_bridge.dependencies import (
    get_activity_feed,
    get_app_settings,
    get_credential_store,
    get_current_user_id,
    get_dashboard_composer,
    get_oauth_handshake_service,
    get_session_manager,
)
from canvas_bridge.schemas import (
    ActivityResponse,
    AuthorizeResponse,
    CallbackResponse,
    CallbackUser,
    CoursesResponse,
    DashboardResponse,
    OAuthCallbackPayload,
    UserResponse,
)
from canvas_bridge.services import (
    ActivityFeed,
    DashboardComposer,
    OAuthHandshakeService,
    SessionManager,
    to_dashboard_user,
)

router = APIRouter()
logger = logging.getLogger(__name__)

CurrentUserId = Annotated[int, Depends(get_current_user_id)]


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get(
    "/auth/canvas/authorize",
    response_model=AuthorizeResponse,
    status_code=HTTPStatus.OK,
)
async def start_canvas_oauth_flow(
    response: Response,
    handshake: Annotated[OAuthHandshakeService, Depends(get_oauth_handshake_service)],
) -> AuthorizeResponse:
    """
    Kick off the OAuth flow by issuing a state value and authorization URL.

    The state is returned to the caller, which keeps its own copy and then
    navigates to ``authorization_url``. It is also set as a short-lived
    HTTP-only cookie for the callback to compare against.
    """
    start = handshake.start()
    handshake.set_state_cookie(response, start.state)
    return AuthorizeResponse(
        authorization_url=start.authorization_url, state=start.state
    )


@router.post(
    "/auth/canvas/callback",
    response_model=CallbackResponse,
    status_code=HTTPStatus.OK,
)
async def handle_canvas_oauth_callback(
    request: Request,
    response: Response,
    handshake: Annotated[OAuthHandshakeService, Depends(get_oauth_handshake_service)],
    payload: Optional[OAuthCallbackPayload] = None,
) -> CallbackResponse:
    """Complete the code exchange, store the credential and open a session."""
    payload = payload or OAuthCallbackPayload()
    # Error responses are built by the app-level handlers, which expire the
    # state cookie through this service.
    request.state.oauth_handshake = handshake
    result = await handshake.complete(
        code=payload.code,
        state=payload.state,
        stored_state=request.cookies.get(handshake.state_cookie_name),
        response=response,
    )
    return CallbackResponse(
        user=CallbackUser(
            id=result.credential.external_user_id,
            name=result.display_name,
        )
    )


@router.post("/auth/logout", status_code=HTTPStatus.OK)
async def logout(
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    redirect: bool = Query(
        default=False,
        description="When true and a front-end URL is configured, redirect there.",
    ),
) -> Response:
    """Destroy the session cookie; the stored credential is kept."""
    response: Response
    if redirect and settings.frontend_base_url:
        response = RedirectResponse(
            url=str(settings.frontend_base_url), status_code=HTTPStatus.SEE_OTHER
        )
    else:
        response = JSONResponse(content={"success": True})
    sessions.destroy(response)
    return response


@router.get("/user/me", response_model=UserResponse)
async def read_current_user(
    user_id: CurrentUserId,
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> UserResponse | JSONResponse:
    """Return the profile captured at the last sign-in."""
    credential = store.get(user_id)
    if credential is None:
        logger.warning("Session for canvas user %s has no stored credential", user_id)
        return JSONResponse(
            status_code=HTTPStatus.NOT_FOUND,
            content={"error": "User not found in database."},
        )
    return UserResponse(user=to_dashboard_user(credential))


@router.get("/canvas/courses", response_model=CoursesResponse)
async def list_courses(
    user_id: CurrentUserId,
    composer: Annotated[DashboardComposer, Depends(get_dashboard_composer)],
) -> CoursesResponse:
    """Courses the user teaches together with their derived SEB status."""
    courses = await composer.list_courses(user_id)
    return CoursesResponse(courses=courses)


@router.get("/activity", response_model=ActivityResponse)
async def list_activity(
    user_id: CurrentUserId,
    activity_feed: Annotated[ActivityFeed, Depends(get_activity_feed)],
) -> ActivityResponse:
    return ActivityResponse(activity=await activity_feed.recent(user_id))


@router.get("/dashboard", response_model=DashboardResponse)
async def load_dashboard(
    user_id: CurrentUserId,
    composer: Annotated[DashboardComposer, Depends(get_dashboard_composer)],
) -> DashboardResponse:
    """Main data loader for the dashboard page: ``{user, courses, activity}``."""
    return await composer.compose(user_id)


__all__ = ["router"]
