"""
Assessment Package - Exam Attempt Engine

Dieses Paket enthält die Prüfungs-Engine: personalisierte Prüfungen aus einer
Fragen-Bank zusammenstellen, als unveränderlichen Snapshot einfrieren,
Antworten entgegennehmen, objektive Fragen automatisch bewerten und die
manuelle Bewertung von Freitext-Antworten koordinieren.

Struktur:
- question_bank/: Fragen, Antwortoptionen und Kategorien
- exams/: Prüfungskonfiguration und Verteilungsregeln
- attempts/: Prüfungsversuche, Antworten, Serializer und Views
- services/: Auswahl, Zusammenstellung, Bewertung und Lebenszyklus
- api/: Fehlerbehandlung für die REST-Schicht

Author: DSP Development Team
Version: 1.0.0
"""
