"""
Question Bank Package

Fragen-Katalog der Prüfungs-Engine: Kategorien, Fragen und Antwortoptionen.
Die Engine liest diese Daten nur und erhöht Nutzungszähler atomar.
"""
