"""
Strict schemas for the Canvas payloads this service consumes.

Canvas returns many more fields than listed here; extra keys are ignored but
every declared field is type-checked at the boundary.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _CanvasModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class CanvasTokenUser(_CanvasModel):
    id: int
    name: Optional[str] = None


class CanvasTokenResponse(_CanvasModel):
    """Successful response of ``POST /login/oauth2/token``."""

    access_token: str
    token_type: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: int = Field(..., gt=0)
    user: Optional[CanvasTokenUser] = None


class CanvasRefreshResponse(_CanvasModel):
    """Refresh grants return a new access token but keep the refresh token."""

    access_token: str
    expires_in: int = Field(..., gt=0)


class CanvasErrorResponse(_CanvasModel):
    error: str = "unknown_error"
    error_description: Optional[str] = None


class CanvasProfile(_CanvasModel):
    """``GET /api/v1/users/self/profile``."""

    id: int
    name: Optional[str] = None
    primary_email: Optional[str] = None
    avatar_url: Optional[str] = None


class CanvasCourse(_CanvasModel):
    id: int
    name: str = ""
    course_code: str = ""
    total_students: Optional[int] = None


class NewQuizSettings(_CanvasModel):
    require_student_access_code: Optional[bool] = None


class CanvasNewQuiz(_CanvasModel):
    """A quiz from the New Quizzes engine (``/api/quiz/v1``)."""

    id: str
    title: Optional[str] = None
    quiz_settings: Optional[NewQuizSettings] = None

    @property
    def requires_lockdown(self) -> bool:
        return bool(self.quiz_settings and self.quiz_settings.require_student_access_code is True)


class CanvasClassicQuiz(_CanvasModel):
    """A quiz from the classic quiz engine (``/api/v1/courses/:id/quizzes``)."""

    id: int
    title: Optional[str] = None
    access_code: Optional[str] = None

    @property
    def requires_lockdown(self) -> bool:
        return bool(self.access_code)


__all__ = [
    "CanvasClassicQuiz",
    "CanvasCourse",
    "CanvasErrorResponse",
    "CanvasNewQuiz",
    "CanvasProfile",
    "CanvasRefreshResponse",
    "CanvasTokenResponse",
    "CanvasTokenUser",
    "NewQuizSettings",
]
