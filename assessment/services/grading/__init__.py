"""
Grading Services Package

Automatische Bewertung bei Abgabe und manuelle Bewertung offener Antworten.
"""

from .aggregation import recompute_attempt_score
from .submission_processor import SubmissionProcessor, SubmissionResult, index_payloads
from .grading_coordinator import GradeResult, GradingCoordinator

__all__ = [
    "recompute_attempt_score",
    "SubmissionProcessor",
    "SubmissionResult",
    "index_payloads",
    "GradeResult",
    "GradingCoordinator",
]
