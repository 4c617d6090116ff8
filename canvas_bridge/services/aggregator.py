"""
Best-effort aggregation of Canvas courses and their quiz readiness.

The course list is fetched once and is fatal on failure. Every course then
queries both quiz engines concurrently; a failing engine contributes no
quizzes, and a course whose own assembly fails is dropped from the result.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, List, Protocol

from canvas_bridge.schemas.canvas import CanvasCourse
from canvas_bridge.schemas.dashboard import CourseStatus, DashboardCourse
from canvas_bridge.utils.concurrency import gather_settled

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from canvas_bridge.clients import CanvasAPIClient

logger = logging.getLogger(__name__)


class QuizObservation(Protocol):
    @property
    def requires_lockdown(self) -> bool: ...


def derive_course_status(quizzes: Iterable[QuizObservation]) -> CourseStatus:
    """Any lockdown quiz wins, then any quiz at all, else nothing to configure."""
    seen_any = False
    for quiz in quizzes:
        if quiz.requires_lockdown:
            return CourseStatus.ACTIVE
        seen_any = True
    return CourseStatus.SETUP if seen_any else CourseStatus.NO_SEB


def build_dashboard_course(
    course: CanvasCourse, quizzes: List[QuizObservation]
) -> DashboardCourse:
    return DashboardCourse(
        id=course.id,
        name=course.name,
        course_code=course.course_code,
        total_students=course.total_students or 0,
        quiz_count=len(quizzes),
        seb_quiz_count=sum(1 for quiz in quizzes if quiz.requires_lockdown),
        status=derive_course_status(quizzes),
    )


class RemoteAggregator:
    """Fan out per-course quiz lookups and fold them into dashboard rows."""

    QUIZ_SOURCES = ("new_quizzes", "classic_quizzes")

    def __init__(self, api_client: "CanvasAPIClient", *, source_timeout: float) -> None:
        self._api = api_client
        self._source_timeout = source_timeout

    async def list_courses_with_quiz_status(
        self, domain: str, access_token: str
    ) -> List[DashboardCourse]:
        courses = await self._api.list_courses(domain, access_token)

        outcomes = await gather_settled(
            self._build_course(domain, access_token, course) for course in courses
        )

        results: List[DashboardCourse] = []
        for course, outcome in zip(courses, outcomes):
            if outcome.ok and outcome.value is not None:
                results.append(outcome.value)
            else:
                logger.warning(
                    "Dropping course %s (%s) from dashboard: %s",
                    course.id,
                    course.course_code,
                    outcome.error,
                )
        return results

    async def _build_course(
        self, domain: str, access_token: str, course: CanvasCourse
    ) -> DashboardCourse:
        outcomes = await gather_settled(
            [
                self._api.list_new_quizzes(domain, access_token, course.id),
                self._api.list_classic_quizzes(domain, access_token, course.id),
            ],
            timeout=self._source_timeout,
        )

        quizzes: List[QuizObservation] = []
        for source, outcome in zip(self.QUIZ_SOURCES, outcomes):
            if outcome.ok:
                quizzes.extend(outcome.value or [])
            else:
                logger.warning(
                    "Could not fetch %s for course %s (%s): %r",
                    source,
                    course.id,
                    course.course_code,
                    outcome.error,
                )
        return build_dashboard_course(course, quizzes)


__all__ = [
    "RemoteAggregator",
    "build_dashboard_course",
    "derive_course_status",
]
