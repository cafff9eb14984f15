import decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


QUESTION_TYPE_CHOICES = [
    ("TRUE_FALSE", "True / False"),
    ("SINGLE_CHOICE", "Single Choice"),
    ("MULTIPLE_CHOICE", "Multiple Choice"),
    ("SHORT_ANSWER", "Short Answer"),
    ("ESSAY", "Essay"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="QuestionCategory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=150, unique=True, verbose_name="Category Name")),
                ("description", models.TextField(blank=True)),
                ("order_index", models.PositiveIntegerField(default=0)),
            ],
            options={
                "verbose_name": "Question Category",
                "verbose_name_plural": "Question Categories",
                "ordering": ["order_index", "name"],
                "db_table": "assessment_question_category",
            },
        ),
        migrations.CreateModel(
            name="Question",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("content", models.TextField(verbose_name="Question Text")),
                (
                    "question_type",
                    models.CharField(
                        choices=QUESTION_TYPE_CHOICES,
                        db_index=True,
                        default="SINGLE_CHOICE",
                        max_length=20,
                    ),
                ),
                (
                    "difficulty",
                    models.CharField(
                        choices=[("EASY", "Easy"), ("MEDIUM", "Medium"), ("HARD", "Hard")],
                        db_index=True,
                        default="MEDIUM",
                        max_length=10,
                    ),
                ),
                (
                    "points",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("1.00"),
                        help_text="Default max score when the exam does not set points per question.",
                        max_digits=7,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                    ),
                ),
                (
                    "correct_boolean",
                    models.BooleanField(blank=True, help_text="Correct value for TRUE_FALSE questions.", null=True),
                ),
                (
                    "answer_key",
                    models.TextField(blank=True, help_text="Reference answer for SHORT_ANSWER / ESSAY graders."),
                ),
                ("explanation", models.TextField(blank=True)),
                ("usage_count", models.PositiveIntegerField(db_index=True, default=0)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "category",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="questions",
                        to="assessment.questioncategory",
                        verbose_name="Category",
                    ),
                ),
            ],
            options={
                "verbose_name": "Question",
                "verbose_name_plural": "Questions",
                "ordering": ["category", "id"],
                "db_table": "assessment_question",
            },
        ),
        migrations.CreateModel(
            name="QuestionOption",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(max_length=20)),
                ("content", models.TextField()),
                ("is_correct", models.BooleanField(default=False)),
                ("order_index", models.PositiveSmallIntegerField(default=0)),
                (
                    "question",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="options",
                        to="assessment.question",
                    ),
                ),
            ],
            options={
                "verbose_name": "Question Option",
                "verbose_name_plural": "Question Options",
                "ordering": ["question", "order_index", "id"],
                "db_table": "assessment_question_option",
                "unique_together": {("question", "key")},
            },
        ),
        migrations.CreateModel(
            name="Exam",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("instructions", models.TextField(blank=True)),
                (
                    "duration_minutes",
                    models.PositiveIntegerField(
                        blank=True, help_text="Time limit per attempt. Empty means no limit.", null=True
                    ),
                ),
                (
                    "total_points",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Spread evenly over all questions whose rule has no points per question.",
                        max_digits=7,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                    ),
                ),
                (
                    "passing_score",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("50.00"),
                        help_text="Pass mark in percent of the attempt's max score.",
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0")),
                            django.core.validators.MaxValueValidator(decimal.Decimal("100")),
                        ],
                    ),
                ),
                ("shuffle_questions", models.BooleanField(default=False)),
                ("shuffle_options", models.BooleanField(default=False)),
                (
                    "show_results_immediately",
                    models.BooleanField(
                        default=False,
                        help_text="Show results (including correct answers) right after submission.",
                    ),
                ),
                ("start_time", models.DateTimeField(blank=True, null=True)),
                ("end_time", models.DateTimeField(blank=True, null=True)),
                (
                    "max_attempts",
                    models.PositiveIntegerField(
                        blank=True, null=True, validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                ("is_published", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Exam",
                "verbose_name_plural": "Exams",
                "ordering": ["-created_at"],
                "db_table": "assessment_exam",
            },
        ),
        migrations.CreateModel(
            name="DistributionRule",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "question_type",
                    models.CharField(
                        blank=True,
                        choices=QUESTION_TYPE_CHOICES,
                        help_text="Empty means any question type.",
                        max_length=20,
                    ),
                ),
                ("quantity", models.PositiveIntegerField(blank=True, null=True)),
                ("easy_count", models.PositiveIntegerField(default=0)),
                ("medium_count", models.PositiveIntegerField(default=0)),
                ("hard_count", models.PositiveIntegerField(default=0)),
                (
                    "points_per_question",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=7,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                    ),
                ),
                ("order_index", models.PositiveIntegerField(default=0)),
                (
                    "exam",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="distributions",
                        to="assessment.exam",
                    ),
                ),
                (
                    "category",
                    models.ForeignKey(
                        blank=True,
                        help_text="Empty means any category.",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="distribution_rules",
                        to="assessment.questioncategory",
                    ),
                ),
            ],
            options={
                "verbose_name": "Distribution Rule",
                "verbose_name_plural": "Distribution Rules",
                "ordering": ["exam", "order_index", "id"],
                "db_table": "assessment_distribution_rule",
            },
        ),
        migrations.CreateModel(
            name="ExamAttempt",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("attempt_number", models.PositiveIntegerField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("IN_PROGRESS", "In Progress"),
                            ("SUBMITTED", "Submitted"),
                            ("GRADED", "Graded"),
                        ],
                        db_index=True,
                        default="IN_PROGRESS",
                        max_length=15,
                    ),
                ),
                (
                    "snapshot",
                    models.JSONField(help_text="Frozen copy of the questions shown, including correct answers."),
                ),
                ("max_score", models.DecimalField(decimal_places=2, default=decimal.Decimal("0"), max_digits=9)),
                (
                    "earned_score",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Recomputed from all answers whenever grading changes.",
                        max_digits=9,
                        null=True,
                    ),
                ),
                ("is_auto_graded", models.BooleanField(default=False)),
                ("started_at", models.DateTimeField()),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("graded_at", models.DateTimeField(blank=True, null=True)),
                ("duration_seconds", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "exam",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="attempts",
                        to="assessment.exam",
                    ),
                ),
                (
                    "test_taker",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="exam_attempts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "graded_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="graded_exam_attempts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Exam Attempt",
                "verbose_name_plural": "Exam Attempts",
                "ordering": ["-started_at"],
                "db_table": "assessment_exam_attempt",
            },
        ),
        migrations.CreateModel(
            name="AttemptAnswer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "question_id",
                    models.PositiveBigIntegerField(
                        help_text="Id of the question in the snapshot (and originally in the bank)."
                    ),
                ),
                ("question_type", models.CharField(choices=QUESTION_TYPE_CHOICES, max_length=20)),
                ("answer_data", models.JSONField(blank=True, null=True)),
                ("is_correct", models.BooleanField(blank=True, null=True)),
                ("score", models.DecimalField(blank=True, decimal_places=2, max_digits=7, null=True)),
                ("max_score", models.DecimalField(decimal_places=2, default=decimal.Decimal("0"), max_digits=7)),
                ("feedback", models.TextField(blank=True)),
                ("grading_error", models.TextField(blank=True)),
                ("graded_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "attempt",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="answers",
                        to="assessment.examattempt",
                    ),
                ),
                (
                    "graded_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="graded_answers",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Attempt Answer",
                "verbose_name_plural": "Attempt Answers",
                "ordering": ["attempt", "id"],
                "db_table": "assessment_attempt_answer",
            },
        ),
        migrations.AddConstraint(
            model_name="examattempt",
            constraint=models.UniqueConstraint(
                condition=models.Q(("status", "IN_PROGRESS")),
                fields=("test_taker", "exam"),
                name="assessment_one_open_attempt_per_exam",
            ),
        ),
        migrations.AddConstraint(
            model_name="examattempt",
            constraint=models.UniqueConstraint(
                fields=("test_taker", "exam", "attempt_number"),
                name="assessment_unique_attempt_number",
            ),
        ),
        migrations.AddConstraint(
            model_name="attemptanswer",
            constraint=models.UniqueConstraint(
                fields=("attempt", "question_id"),
                name="assessment_one_answer_per_question",
            ),
        ),
    ]
