"""Depot local des documents captures ou televerses.

Valide le type et la taille, puis stocke le fichier sous
<racine>/<client>/<horodatage>-<uuid>.<ext>.
"""

from __future__ import annotations

import logging
import time
import uuid
from pathlib import Path
from typing import Protocol

from fiducam.config import ConfigCapture
from fiducam.documents.validation import EXTENSIONS_PAR_TYPE, TypeDocument, valider_document

logger = logging.getLogger(__name__)


class Televerseur(Protocol):
    """Recoit une image confirmee et la transmet (stockage, reseau, ...)."""

    def __call__(self, donnees: bytes, nom: str, type_mime: str) -> Path:
        ...


def nom_capture() -> str:
    """Nom de fichier d'une capture camera: capture-<millisecondes>.jpg."""
    return f"capture-{int(time.time() * 1000)}.jpg"


class DepotLocal:
    """Televerseur qui conserve les documents dans un repertoire local."""

    def __init__(
        self,
        racine: Path,
        client: str = "client",
        type_document: TypeDocument = TypeDocument.JUSTIFICATIF,
        config: ConfigCapture | None = None,
    ) -> None:
        self.racine = racine
        self.client = client
        self.type_document = type_document
        self.config = config or ConfigCapture()

    def __call__(self, donnees: bytes, nom: str, type_mime: str) -> Path:
        """Valide puis stocke le document.

        Args:
            donnees: Contenu du fichier.
            nom: Nom d'origine du fichier (journalise seulement).
            type_mime: Type MIME declare.

        Returns:
            Chemin du fichier stocke.

        Raises:
            ValueError: Si le type ou la taille sont refuses.
        """
        valider_document(len(donnees), type_mime, self.config)

        extension = EXTENSIONS_PAR_TYPE.get(type_mime) or Path(nom).suffix.lower()
        dest_dir = self.racine / self.client
        dest_dir.mkdir(parents=True, exist_ok=True)

        dest_path = dest_dir / f"{int(time.time() * 1000)}-{uuid.uuid4()}{extension}"
        dest_path.write_bytes(donnees)

        logger.info(
            "Document %s stocke: %s -> %s (%d octets)",
            self.type_document.value,
            nom,
            dest_path,
            len(donnees),
        )
        return dest_path
