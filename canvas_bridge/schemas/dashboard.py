"""Response contracts consumed by the dashboard front-end."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class CourseStatus(str, Enum):
    """Derived SEB readiness of a course."""

    ACTIVE = "active"
    SETUP = "setup"
    NO_SEB = "no_seb"


class DashboardUser(BaseModel):
    id: str
    name: str
    email: str
    avatar_url: Optional[str] = None


class DashboardCourse(BaseModel):
    id: int
    name: str
    course_code: str
    total_students: int = 0
    quiz_count: int = 0
    seb_quiz_count: int = 0
    status: CourseStatus


class DashboardActivity(BaseModel):
    id: str
    message: str
    highlight: str
    time: str
    color: str


class DashboardResponse(BaseModel):
    user: DashboardUser
    courses: List[DashboardCourse] = Field(default_factory=list)
    activity: List[DashboardActivity] = Field(default_factory=list)


class CoursesResponse(BaseModel):
    courses: List[DashboardCourse] = Field(default_factory=list)


class ActivityResponse(BaseModel):
    activity: List[DashboardActivity] = Field(default_factory=list)


class UserResponse(BaseModel):
    user: DashboardUser


__all__ = [
    "ActivityResponse",
    "CourseStatus",
    "CoursesResponse",
    "DashboardActivity",
    "DashboardCourse",
    "DashboardResponse",
    "DashboardUser",
    "UserResponse",
]
