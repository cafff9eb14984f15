"""
Transport-Hilfen der Prüfungs-Engine (Fehlerbehandlung für DRF).
"""
