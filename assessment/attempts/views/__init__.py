"""
Exam Attempt Views Package

Dieses Paket enthält alle Views für die Prüfungsdurchführung.

Features:
- Teilnehmer-Views: Start, Zwischenspeichern, Abgabe und Ergebnisse
- Bewerter-Views: Bewertungs-Warteschlange und manuelle Bewertung

Author: DSP Development Team
Version: 1.0.0
"""

from .student_views import *
from .teacher_views import *
