"""Validation et depot des documents transmis a la fiduciaire."""

from __future__ import annotations

from fiducam.documents.depot import DepotLocal, Televerseur, nom_capture
from fiducam.documents.validation import TypeDocument, deviner_type_mime, valider_document

__all__ = [
    "DepotLocal",
    "Televerseur",
    "TypeDocument",
    "deviner_type_mime",
    "nom_capture",
    "valider_document",
]
