import logging
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from ...models import (
    AttemptAnswer,
    Difficulty,
    DistributionRule,
    Exam,
    ExamAttempt,
    Question,
    QuestionCategory,
    QuestionOption,
    QuestionType,
)

logger = logging.getLogger(__name__)
User = get_user_model()

SEED_EXAM_TITLE = "Python Grundlagen - Abschlussprüfung"

# Kategorie -> Liste von (Typ, Schwierigkeit, Frage, Korrektheit)
# Korrektheit: bool für TRUE_FALSE, [(key, text, korrekt)] für Auswahl, Text für offene Fragen
QUESTION_BANK = {
    "Python Grundlagen": [
        (QuestionType.TRUE_FALSE, Difficulty.EASY, "Listen in Python sind veränderbar.", True),
        (QuestionType.TRUE_FALSE, Difficulty.EASY, "Tupel können nach der Erstellung geändert werden.", False),
        (QuestionType.TRUE_FALSE, Difficulty.EASY, "`None` ist in einem if-Ausdruck falsy.", True),
        (
            QuestionType.SINGLE_CHOICE,
            Difficulty.EASY,
            "Welcher Datentyp speichert Schlüssel-Wert-Paare?",
            [("A", "list", False), ("B", "dict", True), ("C", "set", False), ("D", "tuple", False)],
        ),
        (
            QuestionType.SINGLE_CHOICE,
            Difficulty.MEDIUM,
            "Was liefert `len({1, 1, 2})`?",
            [("A", "1", False), ("B", "2", True), ("C", "3", False)],
        ),
        (
            QuestionType.MULTIPLE_CHOICE,
            Difficulty.MEDIUM,
            "Welche Typen sind unveränderlich?",
            [("A", "str", True), ("B", "list", False), ("C", "tuple", True), ("D", "dict", False)],
        ),
        (
            QuestionType.MULTIPLE_CHOICE,
            Difficulty.HARD,
            "Welche Ausdrücke erzeugen einen Generator?",
            [
                ("A", "(x for x in range(3))", True),
                ("B", "[x for x in range(3)]", False),
                ("C", "Eine Funktion mit `yield`", True),
                ("D", "{x for x in range(3)}", False),
            ],
        ),
    ],
    "Fehlerbehandlung": [
        (QuestionType.TRUE_FALSE, Difficulty.EASY, "Ein `finally`-Block wird immer ausgeführt.", True),
        (
            QuestionType.SINGLE_CHOICE,
            Difficulty.MEDIUM,
            "Welche Exception wird bei `int('abc')` ausgelöst?",
            [("A", "TypeError", False), ("B", "ValueError", True), ("C", "KeyError", False)],
        ),
        (
            QuestionType.SHORT_ANSWER,
            Difficulty.MEDIUM,
            "Mit welchem Schlüsselwort löst man eine Exception aus?",
            "raise",
        ),
        (
            QuestionType.ESSAY,
            Difficulty.HARD,
            "Erklären Sie den Unterschied zwischen `except Exception` und einem nackten `except:`.",
            "Ein nacktes except fängt auch SystemExit und KeyboardInterrupt ab.",
        ),
    ],
}


class Command(BaseCommand):
    help = "Seeds a question bank, a published exam with distribution rules and a test-taker/grader pair."

    def add_arguments(self, parser):
        parser.add_argument(
            "--clean",
            action="store_true",
            help="Delete existing assessment data before seeding.",
        )

    def handle(self, *args, **options):
        with transaction.atomic():
            if options["clean"]:
                self._cleanup()

            categories = self._seed_question_bank()
            exam = self._seed_exam(categories)
            self._seed_users()

        self.stdout.write(self.style.SUCCESS(f'Seeding abgeschlossen: Prüfung "{exam.title}" (id {exam.pk}).'))

    def _cleanup(self):
        self.stdout.write(self.style.WARNING("Lösche bestehende Prüfungsdaten..."))
        AttemptAnswer.objects.all().delete()
        ExamAttempt.objects.all().delete()
        DistributionRule.objects.all().delete()
        Exam.objects.all().delete()
        QuestionOption.objects.all().delete()
        Question.objects.all().delete()
        QuestionCategory.objects.all().delete()
        self.stdout.write("  - Prüfungsdaten gelöscht.")

    def _seed_question_bank(self):
        categories = {}
        for order_index, (category_name, questions) in enumerate(QUESTION_BANK.items()):
            category, _ = QuestionCategory.objects.get_or_create(
                name=category_name, defaults={"order_index": order_index}
            )
            categories[category_name] = category

            for question_type, difficulty, content, correctness in questions:
                question, created = Question.objects.get_or_create(
                    category=category,
                    content=content,
                    defaults={"question_type": question_type, "difficulty": difficulty},
                )
                if not created:
                    continue

                if question_type == QuestionType.TRUE_FALSE:
                    question.correct_boolean = correctness
                elif question_type in (QuestionType.SHORT_ANSWER, QuestionType.ESSAY):
                    question.answer_key = correctness
                else:
                    for position, (key, text, is_correct) in enumerate(correctness):
                        QuestionOption.objects.create(
                            question=question,
                            key=key,
                            content=text,
                            is_correct=is_correct,
                            order_index=position,
                        )
                question.save()

            self.stdout.write(f"  - Kategorie '{category_name}': {len(questions)} Fragen")
        return categories

    def _seed_exam(self, categories):
        exam, created = Exam.objects.get_or_create(
            title=SEED_EXAM_TITLE,
            defaults={
                "description": "Zufällig zusammengestellte Prüfung aus dem Fragenkatalog.",
                "duration_minutes": 30,
                "passing_score": Decimal("60.00"),
                "shuffle_questions": True,
                "shuffle_options": True,
                "show_results_immediately": True,
                "max_attempts": 3,
                "is_published": True,
            },
        )
        if created:
            DistributionRule.objects.create(
                exam=exam,
                category=categories["Python Grundlagen"],
                easy_count=2,
                medium_count=1,
                hard_count=1,
                order_index=0,
            )
            DistributionRule.objects.create(
                exam=exam,
                category=categories["Fehlerbehandlung"],
                quantity=2,
                points_per_question=Decimal("2.00"),
                order_index=1,
            )
            self.stdout.write(self.style.SUCCESS(f'Prüfung erstellt: "{exam.title}"'))
        return exam

    def _seed_users(self):
        for username, is_staff in (("student", False), ("grader", True)):
            user, created = User.objects.get_or_create(username=username, defaults={"is_staff": is_staff})
            if created:
                user.set_password(username)
                user.save()
                self.stdout.write(f'  - Benutzer "{username}" erstellt (Passwort: {username})')
