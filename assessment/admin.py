"""
Assessment Application Django Admin Configuration

Admin interface (jazzmin-themed) for the Exam Attempt Engine:
- Question Bank: Categories and questions with inline options
- Exams: Exam configuration with inline distribution rules
- Attempts: Read-mostly view of attempts and their answers

Attempt snapshots are never editable; they are the frozen record of what the
test-taker saw.

Author: DSP Development Team
Version: 1.0.0
"""

from django.contrib import admin
from django.db.models import Count, QuerySet
from django.http import HttpRequest
from django.utils.translation import gettext_lazy as _

# Import all models from the central models registry
from .models import (
    AttemptAnswer,
    DistributionRule,
    Exam,
    ExamAttempt,
    Question,
    QuestionCategory,
    QuestionOption,
)

# --- Question Bank Administration ---


@admin.register(QuestionCategory)
class QuestionCategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "order_index", "question_count")
    search_fields = ("name", "description")
    ordering = ("order_index", "name")

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).annotate(_question_count=Count("questions"))

    @admin.display(description=_("Questions"), ordering="_question_count")
    def question_count(self, obj: QuestionCategory) -> int:
        return obj._question_count


class QuestionOptionInline(admin.TabularInline):
    model = QuestionOption
    extra = 0
    fields = ("key", "content", "is_correct", "order_index")
    ordering = ("order_index",)


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    """
    Administration interface for bank questions.

    ``usage_count`` is maintained by the engine and therefore read-only.
    """

    list_display = ("__str__", "category", "question_type", "difficulty", "points", "usage_count", "is_active")
    list_filter = ("category", "question_type", "difficulty", "is_active")
    search_fields = ("content", "category__name")
    autocomplete_fields = ("category",)
    readonly_fields = ("usage_count", "created_at", "updated_at")
    inlines = [QuestionOptionInline]

    fieldsets = (
        (_("Question"), {"fields": ("category", "content", "question_type", "difficulty", "points")}),
        (
            _("Correct Answer"),
            {
                "fields": ("correct_boolean", "answer_key", "explanation"),
                "description": _("Choice questions are marked through their options."),
            },
        ),
        (_("Status"), {"fields": ("is_active", "usage_count", "created_at", "updated_at")}),
    )

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).select_related("category")


# --- Exam Administration ---


class DistributionRuleInline(admin.TabularInline):
    model = DistributionRule
    extra = 0
    fields = (
        "order_index",
        "category",
        "question_type",
        "quantity",
        "easy_count",
        "medium_count",
        "hard_count",
        "points_per_question",
    )
    ordering = ("order_index",)


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    list_display = ("title", "is_published", "start_time", "end_time", "max_attempts", "attempt_count")
    list_filter = ("is_published",)
    search_fields = ("title", "description")
    inlines = [DistributionRuleInline]

    fieldsets = (
        (_("Basic Information"), {"fields": ("title", "description", "instructions")}),
        (
            _("Availability"),
            {"fields": ("is_published", "start_time", "end_time", "max_attempts", "duration_minutes")},
        ),
        (
            _("Scoring"),
            {"fields": ("total_points", "passing_score", "show_results_immediately")},
        ),
        (_("Presentation"), {"fields": ("shuffle_questions", "shuffle_options")}),
    )

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).annotate(_attempt_count=Count("attempts"))

    @admin.display(description=_("Attempts"), ordering="_attempt_count")
    def attempt_count(self, obj: Exam) -> int:
        return obj._attempt_count


# --- Attempt Administration ---


class AttemptAnswerInline(admin.TabularInline):
    model = AttemptAnswer
    extra = 0
    can_delete = False
    fields = ("question_id", "question_type", "answer_data", "is_correct", "score", "max_score", "grading_error")
    readonly_fields = fields

    def has_add_permission(self, request: HttpRequest, obj=None) -> bool:
        return False


@admin.register(ExamAttempt)
class ExamAttemptAdmin(admin.ModelAdmin):
    list_display = ("id", "exam", "test_taker", "attempt_number", "status", "earned_score", "max_score", "submitted_at")
    list_filter = ("status", "exam")
    search_fields = ("exam__title", "test_taker__username", "test_taker__email")
    readonly_fields = (
        "exam",
        "test_taker",
        "attempt_number",
        "status",
        "snapshot",
        "max_score",
        "earned_score",
        "is_auto_graded",
        "started_at",
        "submitted_at",
        "graded_at",
        "duration_seconds",
        "graded_by",
    )
    inlines = [AttemptAnswerInline]

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).select_related("exam", "test_taker")

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False
