import random

from django.test import SimpleTestCase, TestCase

from assessment.exceptions import InsufficientQuestions, InvalidConfiguration
from assessment.models import Difficulty, Question, QuestionType
from assessment.services.distribution import DistributionResolver, fisher_yates_shuffle
from assessment.services.question_bank import QuestionBankService

from .helpers import add_rule, create_category, create_choice, create_exam, create_true_false


class FisherYatesShuffleTests(SimpleTestCase):
    def test_shuffle_is_a_permutation(self):
        items = list(range(20))
        shuffled = fisher_yates_shuffle(items, random.Random(3))
        self.assertEqual(sorted(shuffled), items)

    def test_same_seed_gives_same_order(self):
        items = list("abcdefghij")
        self.assertEqual(
            fisher_yates_shuffle(items, random.Random(42)),
            fisher_yates_shuffle(items, random.Random(42)),
        )

    def test_input_is_not_modified(self):
        items = [1, 2, 3, 4, 5]
        fisher_yates_shuffle(items, random.Random(1))
        self.assertEqual(items, [1, 2, 3, 4, 5])

    def test_empty_and_single_item(self):
        self.assertEqual(fisher_yates_shuffle([], random.Random(1)), [])
        self.assertEqual(fisher_yates_shuffle(["x"], random.Random(1)), ["x"])


class DistributionResolverTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.category_a = create_category("Algebra")
        cls.category_b = create_category("Geometrie")
        cls.easy_1 = create_true_false(cls.category_a, Difficulty.EASY)
        cls.easy_2 = create_true_false(cls.category_a, Difficulty.EASY)
        cls.medium_1 = create_choice(cls.category_a, difficulty=Difficulty.MEDIUM)
        cls.other = create_true_false(cls.category_b, Difficulty.EASY)

    def resolve(self, exam, seed=7):
        resolver = DistributionResolver(QuestionBankService(), random.Random(seed))
        return resolver.resolve(exam.ordered_rules())

    def test_split_rule_selects_requested_difficulties(self):
        exam = create_exam()
        add_rule(exam, self.category_a, easy_count=2, medium_count=1)

        resolution = self.resolve(exam)

        self.assertEqual(len(resolution.questions), 3)
        self.assertEqual(resolution.total_requested, 3)
        difficulties = sorted(item.question.difficulty for item in resolution.questions)
        self.assertEqual(difficulties, [Difficulty.EASY, Difficulty.EASY, Difficulty.MEDIUM])
        self.assertTrue(all(item.question.category_id == self.category_a.id for item in resolution.questions))

    def test_insufficient_questions_reports_context(self):
        Question.objects.filter(pk=self.easy_2.pk).update(is_active=False)
        exam = create_exam()
        add_rule(exam, self.category_a, easy_count=2, medium_count=1)

        with self.assertRaises(InsufficientQuestions) as ctx:
            self.resolve(exam)

        error = ctx.exception
        self.assertEqual(error.rule_index, 0)
        self.assertEqual(error.difficulty, Difficulty.EASY)
        self.assertEqual(error.requested, 2)
        self.assertEqual(error.available, 1)
        self.assertEqual(error.to_dict()["details"]["available"], 1)

    def test_flat_quantity_ignores_difficulty(self):
        exam = create_exam()
        add_rule(exam, self.category_a, quantity=3)

        resolution = self.resolve(exam)

        self.assertEqual(
            sorted(resolution.question_ids),
            sorted([self.easy_1.id, self.easy_2.id, self.medium_1.id]),
        )

    def test_question_type_filter(self):
        exam = create_exam()
        add_rule(exam, self.category_a, quantity=1, question_type=QuestionType.SINGLE_CHOICE)

        resolution = self.resolve(exam)

        self.assertEqual(resolution.question_ids, [self.medium_1.id])

    def test_no_question_is_selected_twice(self):
        exam = create_exam()
        add_rule(exam, self.category_a, easy_count=1, order_index=0)
        add_rule(exam, self.category_a, easy_count=1, order_index=1)

        resolution = self.resolve(exam)

        self.assertEqual(len(set(resolution.question_ids)), 2)
        self.assertEqual([item.rule_index for item in resolution.questions], [0, 1])

    def test_rule_without_category_draws_from_all_categories(self):
        exam = create_exam()
        add_rule(exam, None, easy_count=3)

        resolution = self.resolve(exam)

        self.assertEqual(
            sorted(resolution.question_ids),
            sorted([self.easy_1.id, self.easy_2.id, self.other.id]),
        )

    def test_least_used_questions_are_preferred(self):
        Question.objects.filter(pk=self.easy_1.pk).update(usage_count=5)
        extra = create_true_false(self.category_a, Difficulty.EASY)
        exam = create_exam()
        add_rule(exam, self.category_a, easy_count=2)

        for seed in range(10):
            resolution = self.resolve(exam, seed=seed)
            self.assertEqual(sorted(resolution.question_ids), sorted([self.easy_2.id, extra.id]))

    def test_same_seed_is_reproducible(self):
        for _ in range(3):
            create_true_false(self.category_a, Difficulty.EASY)
        exam = create_exam()
        add_rule(exam, self.category_a, easy_count=2)

        self.assertEqual(self.resolve(exam, seed=11).question_ids, self.resolve(exam, seed=11).question_ids)

    def test_resolution_has_no_side_effects(self):
        exam = create_exam()
        add_rule(exam, self.category_a, easy_count=2)

        self.resolve(exam)

        self.assertFalse(Question.objects.filter(usage_count__gt=0).exists())

    def test_exam_without_rules_is_invalid(self):
        with self.assertRaises(InvalidConfiguration):
            self.resolve(create_exam())

    def test_inconsistent_rule_is_invalid(self):
        exam = create_exam()
        add_rule(exam, self.category_a, quantity=5, easy_count=2)

        with self.assertRaises(InvalidConfiguration) as ctx:
            self.resolve(exam)
        self.assertEqual(ctx.exception.details["rule_index"], 0)

    def test_rules_requesting_nothing_are_invalid(self):
        exam = create_exam()
        add_rule(exam, self.category_a, quantity=0)

        with self.assertRaises(InvalidConfiguration):
            self.resolve(exam)
