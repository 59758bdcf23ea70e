"""Capture photo de justificatifs: camera, cadre de guidage, recadrage.

Pipeline: demarrer la camera -> calculer le cadre -> capturer -> recadrer
et reduire -> encoder en JPEG -> transmettre au televerseur.
"""

from __future__ import annotations

from fiducam.capture.cadre import (
    CadreGuide,
    RectangleRecadrage,
    calculer_cadre_guide,
    dimensions_sortie,
    rectangle_recadrage,
)
from fiducam.capture.camera import DirectionCamera, FournisseurOpenCV, SessionCamera
from fiducam.capture.encodage import ArtefactRecadre, compresser_si_necessaire
from fiducam.capture.erreurs import (
    ContexteCaptureIndisponible,
    EchecEncodage,
    ErreurCapture,
    PermissionRefusee,
)
from fiducam.capture.moteur import EtatCapture, MoteurCapture

__all__ = [
    "ArtefactRecadre",
    "CadreGuide",
    "ContexteCaptureIndisponible",
    "DirectionCamera",
    "EchecEncodage",
    "ErreurCapture",
    "EtatCapture",
    "FournisseurOpenCV",
    "MoteurCapture",
    "PermissionRefusee",
    "RectangleRecadrage",
    "SessionCamera",
    "calculer_cadre_guide",
    "compresser_si_necessaire",
    "dimensions_sortie",
    "rectangle_recadrage",
]
