import datetime
from decimal import Decimal
from unittest import mock

from django.db import IntegrityError, transaction
from django.test import TestCase

from assessment.exceptions import (
    AnswerNotFound,
    AttemptLimitReached,
    AttemptNotFound,
    InsufficientQuestions,
    InvalidState,
    NotPublished,
    OutOfTimeWindow,
)
from assessment.models import AttemptAnswer, Difficulty, ExamAttempt, Question
from assessment.services.attempts import AttemptService

from .helpers import (
    FakeClock,
    add_rule,
    create_category,
    create_choice,
    create_exam,
    create_true_false,
    create_user,
)


class AttemptServiceTestCase(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.student = create_user("student")
        cls.other_student = create_user("other")
        cls.category = create_category("Python")
        cls.tf = create_true_false(cls.category, Difficulty.EASY, correct=True)
        cls.single = create_choice(cls.category, correct_keys=("B",), difficulty=Difficulty.MEDIUM)
        cls.multi = create_choice(cls.category, correct_keys=("A", "C"), multiple=True, difficulty=Difficulty.HARD)
        cls.exam = create_exam(max_attempts=2)
        add_rule(cls.exam, cls.category, easy_count=1, medium_count=1, hard_count=1)

    def setUp(self):
        self.clock = FakeClock()
        self.service = AttemptService(now=self.clock, seed_source=lambda: 1234)

    def correct_answers(self):
        return [
            {"question_id": self.tf.id, "payload": True},
            {"question_id": self.single.id, "payload": "B"},
            {"question_id": self.multi.id, "payload": ["C", "A"]},
        ]


class StartAttemptTests(AttemptServiceTestCase):
    def test_start_creates_attempt_with_snapshot(self):
        result = self.service.start(self.student, self.exam)

        attempt = result.attempt
        self.assertTrue(result.created)
        self.assertEqual(attempt.status, ExamAttempt.Status.IN_PROGRESS)
        self.assertEqual(attempt.attempt_number, 1)
        self.assertEqual(attempt.started_at, self.clock.current)
        self.assertEqual(len(attempt.snapshot["questions"]), 3)
        self.assertEqual(attempt.snapshot["selection_seed"], 1234)
        self.assertEqual(attempt.max_score, Decimal("3.00"))
        self.assertEqual(len(result.public_questions), 3)
        self.assertTrue(all("correctness" not in q for q in result.public_questions))

    def test_start_increments_usage_counters(self):
        self.service.start(self.student, self.exam)

        self.assertEqual(
            set(Question.objects.values_list("usage_count", flat=True)),
            {1},
        )

    def test_start_is_idempotent(self):
        first = self.service.start(self.student, self.exam)
        second = AttemptService(seed_source=lambda: 999).start(self.student, self.exam)

        self.assertFalse(second.created)
        self.assertEqual(first.attempt.pk, second.attempt.pk)
        self.assertEqual(second.public_questions, first.public_questions)
        self.assertEqual(ExamAttempt.objects.count(), 1)
        self.assertEqual(Question.objects.get(pk=self.tf.pk).usage_count, 1)

    def test_parallel_start_returns_the_winning_attempt(self):
        winner = self.service.start(self.student, self.exam).attempt

        with mock.patch.object(AttemptService, "_open_attempt", side_effect=[None, winner]):
            result = self.service.start(self.student, self.exam)

        self.assertFalse(result.created)
        self.assertEqual(result.attempt.pk, winner.pk)
        self.assertEqual(ExamAttempt.objects.count(), 1)
        self.assertEqual(Question.objects.get(pk=self.tf.pk).usage_count, 1)

    def test_database_allows_one_open_attempt_per_exam(self):
        open_attempt = self.service.start(self.student, self.exam).attempt

        with self.assertRaises(IntegrityError), transaction.atomic():
            ExamAttempt.objects.create(
                exam=self.exam,
                test_taker=self.student,
                attempt_number=open_attempt.attempt_number + 1,
                snapshot=open_attempt.snapshot,
                started_at=self.clock.current,
            )

        # after submitting, a new open attempt is accepted
        self.service.submit(open_attempt.pk, self.correct_answers())
        ExamAttempt.objects.create(
            exam=self.exam,
            test_taker=self.student,
            attempt_number=open_attempt.attempt_number + 1,
            snapshot=open_attempt.snapshot,
            started_at=self.clock.current,
        )
        self.assertEqual(ExamAttempt.objects.filter(test_taker=self.student).count(), 2)

    def test_unpublished_exam_cannot_be_started(self):
        exam = create_exam(is_published=False)
        add_rule(exam, self.category, easy_count=1)

        with self.assertRaises(NotPublished):
            self.service.start(self.student, exam)

    def test_exam_outside_time_window(self):
        exam = create_exam(start_time=self.clock.current + datetime.timedelta(hours=1))
        add_rule(exam, self.category, easy_count=1)

        with self.assertRaises(OutOfTimeWindow):
            self.service.start(self.student, exam)

        exam.start_time = None
        exam.end_time = self.clock.current - datetime.timedelta(minutes=1)
        exam.save()
        with self.assertRaises(OutOfTimeWindow):
            self.service.start(self.student, exam)

    def test_attempt_limit(self):
        for _ in range(2):
            attempt = self.service.start(self.student, self.exam).attempt
            self.service.submit(attempt.pk, self.correct_answers())

        with self.assertRaises(AttemptLimitReached) as ctx:
            self.service.start(self.student, self.exam)
        self.assertEqual(ctx.exception.details["used_attempts"], 2)

        # other test-takers are not affected
        self.assertTrue(self.service.start(self.other_student, self.exam).created)

    def test_second_attempt_gets_next_number(self):
        first = self.service.start(self.student, self.exam).attempt
        self.service.submit(first.pk, [])

        second = self.service.start(self.student, self.exam).attempt

        self.assertEqual(second.attempt_number, 2)

    def test_failed_selection_leaves_nothing_behind(self):
        exam = create_exam()
        add_rule(exam, self.category, easy_count=5)

        with self.assertRaises(InsufficientQuestions):
            self.service.start(self.student, exam)

        self.assertFalse(ExamAttempt.objects.filter(exam=exam).exists())
        self.assertFalse(Question.objects.filter(usage_count__gt=0).exists())


class SaveAndSubmitTests(AttemptServiceTestCase):
    def setUp(self):
        super().setUp()
        self.attempt = self.service.start(self.student, self.exam).attempt

    def test_all_correct_objective_attempt_is_graded_on_submit(self):
        self.clock.advance(minutes=12, seconds=5)

        result = self.service.submit(self.attempt.pk, self.correct_answers(), test_taker=self.student)

        attempt = ExamAttempt.objects.get(pk=self.attempt.pk)
        self.assertTrue(result.auto_graded)
        self.assertEqual(result.duration_seconds, 725)
        self.assertEqual(attempt.status, ExamAttempt.Status.GRADED)
        self.assertTrue(attempt.is_auto_graded)
        self.assertEqual(attempt.earned_score, Decimal("3.00"))
        self.assertEqual(attempt.submitted_at, self.clock.current)
        self.assertEqual(attempt.answers.count(), 3)

    def test_wrong_and_missing_answers_score_zero(self):
        self.service.submit(
            self.attempt.pk,
            [
                {"question_id": self.tf.id, "payload": False},
                {"question_id": self.multi.id, "payload": ["A"]},
            ],
        )

        attempt = ExamAttempt.objects.get(pk=self.attempt.pk)
        self.assertEqual(attempt.status, ExamAttempt.Status.GRADED)
        self.assertEqual(attempt.earned_score, Decimal("0"))
        unanswered = attempt.answers.get(question_id=self.single.id)
        self.assertIsNone(unanswered.answer_data)
        self.assertFalse(unanswered.is_correct)
        self.assertEqual(unanswered.score, Decimal("0"))

    def test_saved_answers_are_merged_on_submit(self):
        self.service.save_answer(self.attempt.pk, self.tf.id, True, test_taker=self.student)
        self.service.save_answer(self.attempt.pk, self.single.id, "A")
        self.service.save_answer(self.attempt.pk, self.single.id, "B")

        self.service.submit(self.attempt.pk, [{"question_id": self.multi.id, "payload": ["A", "C"]}])

        attempt = ExamAttempt.objects.get(pk=self.attempt.pk)
        self.assertEqual(attempt.earned_score, Decimal("3.00"))
        self.assertEqual(attempt.answers.count(), 3)

    def test_submitted_payload_replaces_saved_one(self):
        self.service.save_answer(self.attempt.pk, self.single.id, "B")

        self.service.submit(self.attempt.pk, [{"question_id": self.single.id, "payload": "C"}])

        answer = AttemptAnswer.objects.get(attempt=self.attempt, question_id=self.single.id)
        self.assertEqual(answer.answer_data, "C")
        self.assertFalse(answer.is_correct)

    def test_unreadable_payload_is_recorded_and_others_are_graded(self):
        result = self.service.submit(
            self.attempt.pk,
            [
                {"question_id": self.tf.id, "payload": "vielleicht"},
                {"question_id": self.single.id, "payload": "B"},
                {"question_id": self.multi.id, "payload": ["A", "C"]},
            ],
        )

        self.assertEqual(result.failed_items, [self.tf.id])
        broken = AttemptAnswer.objects.get(attempt=self.attempt, question_id=self.tf.id)
        self.assertFalse(broken.is_correct)
        self.assertEqual(broken.score, Decimal("0"))
        self.assertNotEqual(broken.grading_error, "")
        self.assertEqual(ExamAttempt.objects.get(pk=self.attempt.pk).earned_score, Decimal("2.00"))

    def test_unknown_questions_are_ignored_on_submit(self):
        self.service.submit(self.attempt.pk, [{"question_id": 987654, "payload": True}])

        self.assertFalse(AttemptAnswer.objects.filter(question_id=987654).exists())
        self.assertEqual(AttemptAnswer.objects.filter(attempt=self.attempt).count(), 3)

    def test_resubmission_fails(self):
        self.service.submit(self.attempt.pk, self.correct_answers())

        with self.assertRaises(InvalidState):
            self.service.submit(self.attempt.pk, self.correct_answers())

    def test_save_after_submit_fails(self):
        self.service.submit(self.attempt.pk, [])

        with self.assertRaises(InvalidState):
            self.service.save_answer(self.attempt.pk, self.tf.id, True)

    def test_save_for_unknown_question_fails(self):
        with self.assertRaises(AnswerNotFound):
            self.service.save_answer(self.attempt.pk, 987654, True)

    def test_foreign_attempt_is_not_found(self):
        with self.assertRaises(AttemptNotFound):
            self.service.submit(self.attempt.pk, [], test_taker=self.other_student)
        with self.assertRaises(AttemptNotFound):
            self.service.get_attempt_detail(self.attempt.pk, test_taker=self.other_student)

    def test_grading_uses_snapshot_not_live_bank(self):
        answers = self.correct_answers()
        Question.objects.filter(pk=self.tf.pk).update(correct_boolean=False)
        self.single.options.filter(key="B").update(is_correct=False)
        self.multi.delete()

        self.service.submit(self.attempt.pk, answers)

        attempt = ExamAttempt.objects.get(pk=self.attempt.pk)
        self.assertEqual(attempt.earned_score, Decimal("3.00"))

    def test_identical_answers_grade_identically(self):
        other = self.service.start(self.other_student, self.exam).attempt

        self.service.submit(self.attempt.pk, self.correct_answers())
        self.service.submit(other.pk, self.correct_answers())

        first = list(AttemptAnswer.objects.filter(attempt=self.attempt).order_by("question_id").values_list("score", "is_correct"))
        second = list(AttemptAnswer.objects.filter(attempt=other).order_by("question_id").values_list("score", "is_correct"))
        self.assertEqual(first, second)


class AttemptReadTests(AttemptServiceTestCase):
    def test_detail_contains_public_questions_and_saved_answers(self):
        attempt = self.service.start(self.student, self.exam).attempt
        self.service.save_answer(attempt.pk, self.single.id, {"option_id": "B"})

        detail = self.service.get_attempt_detail(attempt.pk, test_taker=self.student)

        self.assertEqual(len(detail.public_questions), 3)
        self.assertEqual(detail.saved_answers, {self.single.id: {"option_id": "B"}})

    def test_list_attempts_is_paged_and_filtered(self):
        other_exam = create_exam(title="Zweite Prüfung")
        add_rule(other_exam, self.category, easy_count=1)

        first = self.service.start(self.student, self.exam).attempt
        self.service.submit(first.pk, [])
        self.clock.advance(minutes=1)
        self.service.start(self.student, self.exam)
        self.clock.advance(minutes=1)
        self.service.start(self.student, other_exam)
        self.service.start(self.other_student, self.exam)

        page = self.service.list_attempts(self.student, limit=2)
        self.assertEqual(page.meta["total"], 3)
        self.assertEqual(page.meta["total_pages"], 2)
        self.assertEqual(len(page.items), 2)
        self.assertEqual(page.items[0].exam_id, other_exam.id)

        filtered = self.service.list_attempts(self.student, exam_id=self.exam.id)
        self.assertEqual(filtered.meta["total"], 2)
