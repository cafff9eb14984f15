"""
Root URL configuration for the assessment backend.

- /admin/: Django admin (jazzmin)
- /api/assessment/: Exam Attempt Engine API and JWT token endpoints
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/assessment/", include("assessment.urls")),
]
