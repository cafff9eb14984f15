"""
Assessment Application URL Configuration

URL Structure (below /api/assessment/):
- token/: Authentication endpoints (JWT cookies)
- exams/: Available exams and attempt start
- attempts/: Test-taker attempt operations (resume, save, submit, results)
- grading/: Grader endpoints (pending queue, manual grading, full results)

Author: DSP Development Team
Version: 1.0.0
"""

from typing import List
from django.urls import path, include, URLPattern
from rest_framework_simplejwt.views import TokenVerifyView

# Import der Views
from .api import auth_views
from .attempts import views as attempt_views

app_name = "assessment"

# --- Exams ---

exams_urlpatterns: List[URLPattern] = [
    path("available/", attempt_views.AvailableExamsView.as_view(), name="available-exams"),
    path("<int:exam_id>/start/", attempt_views.StartAttemptView.as_view(), name="start-attempt"),
]

# --- Attempts (test-taker) ---

attempts_urlpatterns: List[URLPattern] = [
    path("", attempt_views.AttemptListView.as_view(), name="attempt-list"),
    path("<int:attempt_id>/", attempt_views.AttemptDetailView.as_view(), name="attempt-detail"),
    path("<int:attempt_id>/answers/", attempt_views.SaveAnswerView.as_view(), name="save-answer"),
    path("<int:attempt_id>/submit/", attempt_views.SubmitAttemptView.as_view(), name="submit-attempt"),
    path("<int:attempt_id>/result/", attempt_views.AttemptResultView.as_view(), name="attempt-result"),
]

# --- Grading (requires staff privileges) ---

grading_urlpatterns: List[URLPattern] = [
    path("pending/", attempt_views.PendingGradingListView.as_view(), name="pending-grading"),
    path("answers/<int:answer_id>/", attempt_views.GradeAnswerView.as_view(), name="grade-answer"),
    path(
        "attempts/<int:attempt_id>/result/",
        attempt_views.GraderAttemptResultView.as_view(),
        name="grader-attempt-result",
    ),
]

urlpatterns: List[URLPattern] = [
    # Authentication endpoints (JWT token management)
    path("token/", auth_views.CookieTokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("token/refresh/", auth_views.CookieTokenRefreshView.as_view(), name="token_refresh"),
    path("token/verify/", TokenVerifyView.as_view(), name="token_verify"),
    path("logout/", auth_views.LogoutView.as_view(), name="logout"),

    path("exams/", include((exams_urlpatterns, "exams"))),
    path("attempts/", include((attempts_urlpatterns, "attempts"))),
    path("grading/", include((grading_urlpatterns, "grading"))),
]
