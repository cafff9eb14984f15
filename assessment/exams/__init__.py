"""
Exams Package

Prüfungskonfiguration: Veröffentlichung, Zeitfenster, Versuchslimit,
Misch-Optionen und Verteilungsregeln für die Fragenauswahl.
"""
