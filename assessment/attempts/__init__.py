"""
Exam Attempts - Prüfungsversuche

Dieses Paket enthält Versuche, Antworten und die zugehörigen API-Views.

Models:
- ExamAttempt: Ein Prüfungsversuch inkl. eingefrorenem Fragen-Snapshot
- AttemptAnswer: Eine Antwort pro Snapshot-Frage

Author: DSP Development Team
Version: 1.0.0
"""
