"""Bearer-authenticated, paginated reads against the Canvas REST API."""

from __future__ import annotations

import logging
from typing import Any, List, Type, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from canvas_bridge.core.config import CanvasSettings
from canvas_bridge.core.errors import (
    InfrastructureError,
    PayloadValidationError,
    UpstreamError,
    UpstreamRejectedError,
)
from canvas_bridge.schemas.canvas import CanvasClassicQuiz, CanvasCourse, CanvasNewQuiz

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

COURSES_PATH = (
    "/api/v1/courses?enrollment_type=teacher&enrollment_state=active"
    "&include[]=total_students&state[]=available"
)


class CanvasAPIClient:
    """Thin wrapper around the Canvas endpoints the dashboard reads."""

    def __init__(
        self,
        canvas_settings: CanvasSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._canvas = canvas_settings
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._canvas.request_timeout_seconds,
            transport=self._transport,
        )

    async def get_paginated(self, domain: str, path: str, access_token: str) -> List[Any]:
        """
        GET ``path`` and follow ``Link: rel="next"`` headers.

        A 401 raises ``UpstreamRejectedError``; any other non-2xx raises
        ``UpstreamError``. Items from every page are concatenated.
        """
        separator = "&" if "?" in path else "?"
        url: str | None = f"{domain}{path}{separator}per_page={self._canvas.page_size}"
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
        }
        items: List[Any] = []
        pages = 0

        async with self._client() as client:
            while url and pages < self._canvas.max_pages:
                try:
                    response = await client.get(url, headers=headers)
                except httpx.HTTPError as exc:
                    raise InfrastructureError(f"Canvas request to {path} failed: {exc}") from exc

                if response.status_code == httpx.codes.UNAUTHORIZED:
                    raise UpstreamRejectedError(path)
                if not response.is_success:
                    raise UpstreamError(response.status_code, path, response.text)

                try:
                    page = response.json()
                except ValueError as exc:
                    raise PayloadValidationError(f"Canvas returned non-JSON body on {path}.") from exc
                if not isinstance(page, list):
                    raise PayloadValidationError(f"Expected a JSON array from {path}.")

                items.extend(page)
                pages += 1
                url = response.links.get("next", {}).get("url")

        if url:
            logger.warning("Stopped paginating %s after %s pages", path, pages)
        return items

    async def list_courses(self, domain: str, access_token: str) -> List[CanvasCourse]:
        """Active courses the user teaches, with ``total_students`` included."""
        raw = await self.get_paginated(domain, COURSES_PATH, access_token)
        return _validate_list(CanvasCourse, raw, COURSES_PATH)

    async def list_new_quizzes(
        self, domain: str, access_token: str, course_id: int
    ) -> List[CanvasNewQuiz]:
        path = f"/api/quiz/v1/courses/{course_id}/quizzes"
        raw = await self.get_paginated(domain, path, access_token)
        return _validate_list(CanvasNewQuiz, raw, path)

    async def list_classic_quizzes(
        self, domain: str, access_token: str, course_id: int
    ) -> List[CanvasClassicQuiz]:
        path = f"/api/v1/courses/{course_id}/quizzes"
        raw = await self.get_paginated(domain, path, access_token)
        return _validate_list(CanvasClassicQuiz, raw, path)


def _validate_list(model: Type[ModelT], raw: List[Any], path: str) -> List[ModelT]:
    try:
        return TypeAdapter(List[model]).validate_python(raw)  # type: ignore[valid-type]
    except ValidationError as exc:
        raise PayloadValidationError(f"Unexpected payload shape from {path}: {exc}") from exc


__all__ = ["COURSES_PATH", "CanvasAPIClient"]
