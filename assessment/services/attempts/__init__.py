"""
Attempt Services Package

Start, Zwischenspeichern, Abgabe und Ergebnisse von Prüfungsversuchen.
"""

from .attempt_service import AttemptDetail, AttemptService, StartResult, default_seed_source
from .result_service import AttemptResultService, percentage_of

__all__ = [
    "AttemptDetail",
    "AttemptService",
    "StartResult",
    "default_seed_source",
    "AttemptResultService",
    "percentage_of",
]
