"""Superposition du cadre de guidage sur l'image video."""

from __future__ import annotations

import cv2
import numpy as np

from fiducam.capture.cadre import CadreGuide

VERT = (128, 222, 74)  # BGR
BLANC = (255, 255, 255)
INSTRUCTION = "Placez le document dans le cadre"


def dessiner_cadre(trame: np.ndarray, cadre: CadreGuide, epaisseur: int = 2) -> np.ndarray:
    """Assombrit l'exterieur du cadre et dessine sa bordure et ses coins.

    La trame d'origine n'est pas modifiee.
    """
    hauteur, largeur = trame.shape[:2]
    x1 = round(largeur * cadre.gauche)
    y1 = round(hauteur * cadre.haut)
    x2 = round(largeur * (1.0 - cadre.droite))
    y2 = round(hauteur * (1.0 - cadre.bas))

    sortie = (trame * 0.5).astype(trame.dtype)
    sortie[y1:y2, x1:x2] = trame[y1:y2, x1:x2]

    cv2.rectangle(sortie, (x1, y1), (x2 - 1, y2 - 1), VERT, epaisseur)

    coin = max(12, min(x2 - x1, y2 - y1) // 10)
    accent = epaisseur * 2
    for cx, cy, dx, dy in (
        (x1, y1, 1, 1),
        (x2 - 1, y1, -1, 1),
        (x1, y2 - 1, 1, -1),
        (x2 - 1, y2 - 1, -1, -1),
    ):
        cv2.line(sortie, (cx, cy), (cx + dx * coin, cy), VERT, accent)
        cv2.line(sortie, (cx, cy), (cx, cy + dy * coin), VERT, accent)

    echelle = max(0.5, largeur / 1280)
    (l_texte, h_texte), _ = cv2.getTextSize(INSTRUCTION, cv2.FONT_HERSHEY_SIMPLEX, echelle, 2)
    position = ((largeur - l_texte) // 2, max(h_texte + 4, round(hauteur * 0.05)))
    cv2.putText(
        sortie, INSTRUCTION, position, cv2.FONT_HERSHEY_SIMPLEX, echelle, BLANC, 2, cv2.LINE_AA
    )
    return sortie
