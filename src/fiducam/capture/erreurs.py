"""Erreurs de la capture photo."""

from __future__ import annotations


class ErreurCapture(Exception):
    """Erreur de base de la capture."""


class PermissionRefusee(ErreurCapture):
    """Acces a la camera refuse ou camera indisponible."""


class ContexteCaptureIndisponible(ErreurCapture):
    """Pas de session active, pas d'image video ou pas de cadre au moment de la capture."""


class EchecEncodage(ErreurCapture):
    """L'encodage de l'image finale n'a produit aucune donnee."""
