"""Public schema exports."""

from .auth import AuthorizeResponse, CallbackResponse, CallbackUser, OAuthCallbackPayload
from .canvas import (
    CanvasClassicQuiz,
    CanvasCourse,
    CanvasErrorResponse,
    CanvasNewQuiz,
    CanvasProfile,
    CanvasRefreshResponse,
    CanvasTokenResponse,
    CanvasTokenUser,
)
from .dashboard import (
    ActivityResponse,
    CourseStatus,
    CoursesResponse,
    DashboardActivity,
    DashboardCourse,
    DashboardResponse,
    DashboardUser,
    UserResponse,
)

__all__ = [
    "ActivityResponse",
    "AuthorizeResponse",
    "CallbackResponse",
    "CallbackUser",
    "CanvasClassicQuiz",
    "CanvasCourse",
    "CanvasErrorResponse",
    "CanvasNewQuiz",
    "CanvasProfile",
    "CanvasRefreshResponse",
    "CanvasTokenResponse",
    "CanvasTokenUser",
    "CourseStatus",
    "CoursesResponse",
    "DashboardActivity",
    "DashboardCourse",
    "DashboardResponse",
    "DashboardUser",
    "OAuthCallbackPayload",
    "UserResponse",
]
