"""
Question Bank Services Package

Lesezugriff auf den Fragen-Katalog und atomare Nutzungszähler.
"""

from .question_bank_service import QuestionBankService

__all__ = ["QuestionBankService"]
