"""Validation des documents avant televersement (type et taille)."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from fiducam.config import ConfigCapture

_TYPES_PAR_EXTENSION = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".pdf": "application/pdf",
}

EXTENSIONS_PAR_TYPE = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "application/pdf": ".pdf",
}


class TypeDocument(str, Enum):
    """Categorie du document transmis a la fiduciaire."""

    JUSTIFICATIF = "justificatif"
    TICKET = "ticket"


def deviner_type_mime(chemin: Path) -> str | None:
    """Type MIME d'apres l'extension, None si l'extension est inconnue."""
    return _TYPES_PAR_EXTENSION.get(chemin.suffix.lower())


def valider_document(taille: int, type_mime: str | None, config: ConfigCapture) -> None:
    """Verifie le type et la taille d'un document.

    Raises:
        ValueError: Si le type n'est pas accepte ou si le fichier est trop gros.
    """
    if type_mime not in config.types_mime_acceptes:
        raise ValueError(
            f"Type de fichier non supporte: {type_mime}. "
            f"Types acceptes: {', '.join(config.types_mime_acceptes)}"
        )

    if taille > config.taille_max_octets:
        max_mo = config.taille_max_octets / (1024 * 1024)
        raise ValueError(f"Fichier trop volumineux (max {max_mo:g} Mo)")

    if taille == 0:
        raise ValueError("Fichier vide")
