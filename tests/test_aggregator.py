from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Dict, List

import pytest

from canvas_bridge.core.errors import UpstreamError, UpstreamRejectedError
from canvas_bridge.schemas.canvas import CanvasClassicQuiz, CanvasCourse, CanvasNewQuiz
from canvas_bridge.schemas.dashboard import CourseStatus
from canvas_bridge.services.aggregator import RemoteAggregator, derive_course_status


@dataclass
class Quiz:
    requires_lockdown: bool


def _new_quiz(quiz_id: str, lockdown: bool) -> CanvasNewQuiz:
    return CanvasNewQuiz.model_validate(
        {"id": quiz_id, "quiz_settings": {"require_student_access_code": lockdown}}
    )


def _classic_quiz(quiz_id: int, access_code: str | None = None) -> CanvasClassicQuiz:
    return CanvasClassicQuiz(id=quiz_id, access_code=access_code)


class DummyAPIClient:
    """Serves canned courses and quizzes; values that are exceptions are raised."""

    def __init__(
        self,
        courses,
        new_quizzes: Dict[int, object] | None = None,
        classic_quizzes: Dict[int, object] | None = None,
    ) -> None:
        self.courses = courses
        self.new_quizzes = new_quizzes or {}
        self.classic_quizzes = classic_quizzes or {}
        self.calls: List[tuple] = []

    async def list_courses(self, domain: str, access_token: str):
        self.calls.append(("courses", domain, access_token))
        if isinstance(self.courses, BaseException):
            raise self.courses
        return self.courses

    async def list_new_quizzes(self, domain: str, access_token: str, course_id: int):
        return await self._serve(self.new_quizzes.get(course_id, []))

    async def list_classic_quizzes(self, domain: str, access_token: str, course_id: int):
        return await self._serve(self.classic_quizzes.get(course_id, []))

    @staticmethod
    async def _serve(value):
        if isinstance(value, BaseException):
            raise value
        if callable(value):
            return await value()
        return value


def _course(course_id: int, code: str, students: int | None = 10) -> CanvasCourse:
    return CanvasCourse(id=course_id, name=f"Course {code}", course_code=code, total_students=students)


def _aggregator(api: DummyAPIClient, timeout: float = 1.0) -> RemoteAggregator:
    return RemoteAggregator(api, source_timeout=timeout)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "quizzes, expected",
    [
        ([], CourseStatus.NO_SEB),
        ([Quiz(False)], CourseStatus.SETUP),
        ([Quiz(False), Quiz(False)], CourseStatus.SETUP),
        ([Quiz(True)], CourseStatus.ACTIVE),
        ([Quiz(False), Quiz(False), Quiz(True)], CourseStatus.ACTIVE),
    ],
)
def test_derive_course_status(quizzes, expected) -> None:
    assert derive_course_status(quizzes) is expected


@pytest.mark.anyio
async def test_statuses_across_courses() -> None:
    api = DummyAPIClient(
        [_course(1, "A"), _course(2, "B"), _course(3, "C")],
        new_quizzes={1: [_new_quiz("a1", True)], 2: [_new_quiz("b1", False)]},
        classic_quizzes={2: [_classic_quiz(22)]},
    )

    courses = await _aggregator(api).list_courses_with_quiz_status("https://d", "tok")

    summary = [(c.course_code, c.status, c.quiz_count, c.seb_quiz_count) for c in courses]
    assert summary == [
        ("A", CourseStatus.ACTIVE, 1, 1),
        ("B", CourseStatus.SETUP, 2, 0),
        ("C", CourseStatus.NO_SEB, 0, 0),
    ]
    assert api.calls == [("courses", "https://d", "tok")]


@pytest.mark.anyio
async def test_failed_quiz_sources_degrade_to_empty() -> None:
    api = DummyAPIClient(
        [_course(1, "A"), _course(2, "B")],
        new_quizzes={1: [_new_quiz("a1", True)], 2: UpstreamError(500, "/api/quiz/v1/courses/2/quizzes")},
        classic_quizzes={2: UpstreamRejectedError("/api/v1/courses/2/quizzes")},
    )

    courses = await _aggregator(api).list_courses_with_quiz_status("https://d", "tok")

    assert [c.course_code for c in courses] == ["A", "B"]
    assert courses[1].status is CourseStatus.NO_SEB
    assert courses[1].quiz_count == 0


@pytest.mark.anyio
async def test_one_failed_source_keeps_the_other() -> None:
    api = DummyAPIClient(
        [_course(1, "A")],
        new_quizzes={1: RuntimeError("quiz engine down")},
        classic_quizzes={1: [_classic_quiz(1, "seb-secret"), _classic_quiz(2)]},
    )

    [course] = await _aggregator(api).list_courses_with_quiz_status("https://d", "tok")

    assert course.status is CourseStatus.ACTIVE
    assert (course.quiz_count, course.seb_quiz_count) == (2, 1)


@pytest.mark.anyio
async def test_slow_source_times_out_without_failing_course() -> None:
    async def never_finishes():
        await asyncio.sleep(10)
        return [_new_quiz("late", True)]

    api = DummyAPIClient(
        [_course(1, "A")],
        new_quizzes={1: never_finishes},
        classic_quizzes={1: [_classic_quiz(5)]},
    )

    [course] = await _aggregator(api, timeout=0.05).list_courses_with_quiz_status(
        "https://d", "tok"
    )

    assert course.status is CourseStatus.SETUP
    assert course.quiz_count == 1


@pytest.mark.anyio
async def test_course_list_failure_is_fatal() -> None:
    api = DummyAPIClient(UpstreamError(503, "/api/v1/courses"))

    with pytest.raises(UpstreamError):
        await _aggregator(api).list_courses_with_quiz_status("https://d", "tok")


@pytest.mark.anyio
async def test_course_whose_assembly_fails_is_dropped() -> None:
    api = DummyAPIClient(
        [_course(1, "A"), _course(2, "B")],
        new_quizzes={2: [object()]},
    )

    courses = await _aggregator(api).list_courses_with_quiz_status("https://d", "tok")

    assert [c.course_code for c in courses] == ["A"]


@pytest.mark.anyio
async def test_zero_students_and_zero_quizzes_are_kept() -> None:
    api = DummyAPIClient([_course(1, "EMPTY", students=0), _course(2, "UNKNOWN", students=None)])

    courses = await _aggregator(api).list_courses_with_quiz_status("https://d", "tok")

    assert [(c.course_code, c.total_students, c.quiz_count) for c in courses] == [
        ("EMPTY", 0, 0),
        ("UNKNOWN", 0, 0),
    ]


@pytest.mark.anyio
async def test_no_courses() -> None:
    assert await _aggregator(DummyAPIClient([])).list_courses_with_quiz_status("d", "t") == []
