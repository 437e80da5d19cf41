"""Vérification périodique de la disponibilité des chaînes d'un catalogue."""

__version__ = "1.0.0"
