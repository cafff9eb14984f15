"""
Exam Attempt Engine Services Package

Service Layer der Prüfungs-Engine. Die Services bekommen ihre Abhängigkeiten
(Fragen-Repository, Zufallsquelle, Uhr) per Konstruktor übergeben.

Subpackages:
- question_bank: Kandidatenabfrage und Nutzungszähler
- distribution: Fragenauswahl nach Verteilungsregeln
- assembly: Snapshot und Reihenfolge
- grading: Automatische und manuelle Bewertung
- attempts: Lebenszyklus und Ergebnisse

Author: DSP Development Team
Version: 1.0.0
"""

from .question_bank import QuestionBankService
from .distribution import DistributionResolver, fisher_yates_shuffle
from .assembly import ExamAssembler, ExamSnapshot
from .grading import GradingCoordinator, SubmissionProcessor
from .attempts import AttemptResultService, AttemptService
from .pagination import Page, paginate

__all__ = [
    "QuestionBankService",
    "DistributionResolver",
    "fisher_yates_shuffle",
    "ExamAssembler",
    "ExamSnapshot",
    "GradingCoordinator",
    "SubmissionProcessor",
    "AttemptResultService",
    "AttemptService",
    "Page",
    "paginate",
]
