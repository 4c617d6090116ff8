"""Compose the dashboard payload from the session user, token and Canvas data."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, List

from canvas_bridge.core.errors import UnknownUserError
from canvas_bridge.models import UserCredential
from canvas_bridge.schemas.dashboard import (
    DashboardActivity,
    DashboardCourse,
    DashboardResponse,
    DashboardUser,
)

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from canvas_bridge.clients import CredentialStore
    from canvas_bridge.services.aggregator import RemoteAggregator
    from canvas_bridge.services.token_refresher import TokenRefresher


def to_dashboard_user(credential: UserCredential) -> DashboardUser:
    profile = credential.profile
    return DashboardUser(
        id=str(credential.external_user_id),
        name=profile.name or "Unknown User",
        email=profile.email or "",
        avatar_url=profile.avatar_url or None,
    )


class ActivityFeed:
    """Recent instructor activity. Nothing records activity yet, so it is always empty."""

    async def recent(self, external_user_id: int) -> List[DashboardActivity]:
        return []


class DashboardComposer:
    def __init__(
        self,
        store: "CredentialStore",
        refresher: "TokenRefresher",
        aggregator: "RemoteAggregator",
        activity_feed: ActivityFeed,
    ) -> None:
        self._store = store
        self._refresher = refresher
        self._aggregator = aggregator
        self._activity = activity_feed

    async def list_courses(self, external_user_id: int) -> List[DashboardCourse]:
        token = await self._refresher.ensure_valid_token(external_user_id)
        return await self._aggregator.list_courses_with_quiz_status(
            token.domain, token.access_token
        )

    async def compose(self, external_user_id: int) -> DashboardResponse:
        token = await self._refresher.ensure_valid_token(external_user_id)
        credential = self._store.get(external_user_id)
        if credential is None:
            raise UnknownUserError(external_user_id)

        courses, activity = await asyncio.gather(
            self._aggregator.list_courses_with_quiz_status(
                token.domain, token.access_token
            ),
            self._activity.recent(external_user_id),
        )
        return DashboardResponse(
            user=to_dashboard_user(credential),
            courses=courses,
            activity=activity,
        )


__all__ = ["ActivityFeed", "DashboardComposer", "to_dashboard_user"]
