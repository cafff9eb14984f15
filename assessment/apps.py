"""
Assessment Application Configuration

This module contains the Django application configuration for the Exam Attempt
Engine. The app bundles the question bank, exam configuration, attempt storage
and the grading workflow under a single Django app namespace.

Author: DSP Development Team
Version: 1.0.0
"""

from django.apps import AppConfig


class AssessmentConfig(AppConfig):
    """
    Configuration class for the assessment Django application.

    Attributes:
        default_auto_field: Default primary key field type for models
        name: Application name for Django registration
        verbose_name: Human-readable application name for admin interface
    """

    default_auto_field: str = "django.db.models.BigAutoField"
    name: str = "assessment"
    verbose_name: str = "Exam Attempt Engine"
