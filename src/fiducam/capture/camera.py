"""Acces a la camera du poste (OpenCV) et session video active.

Le moteur de capture ne depend que des protocoles FournisseurCamera et
FluxVideo; FournisseurOpenCV en est l'implementation materielle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

import cv2
import numpy as np

from fiducam.capture.erreurs import PermissionRefusee
from fiducam.config import ConfigCapture

logger = logging.getLogger(__name__)


class DirectionCamera(str, Enum):
    """Camera physique utilisee."""

    USER = "user"
    ENVIRONMENT = "environment"

    def inverser(self) -> DirectionCamera:
        if self is DirectionCamera.USER:
            return DirectionCamera.ENVIRONMENT
        return DirectionCamera.USER


@runtime_checkable
class FluxVideo(Protocol):
    """Flux video ouvert sur une camera."""

    @property
    def actif(self) -> bool:
        ...

    def lire_image(self) -> np.ndarray | None:
        """Retourne la derniere image (BGR) ou None si aucune n'est disponible."""
        ...

    def arreter(self) -> None:
        """Libere la camera. Sans effet si deja arrete."""
        ...


class FournisseurCamera(Protocol):
    """Ouvre un flux video pour une direction donnee."""

    def ouvrir(
        self, direction: DirectionCamera, largeur_ideale: int, hauteur_ideale: int
    ) -> FluxVideo:
        """Ouvre la camera. Leve PermissionRefusee si l'acces echoue."""
        ...


class FluxOpenCV:
    """Flux video sur un cv2.VideoCapture."""

    def __init__(self, capture: cv2.VideoCapture) -> None:
        self._capture: cv2.VideoCapture | None = capture

    @property
    def actif(self) -> bool:
        return self._capture is not None and self._capture.isOpened()

    @property
    def resolution(self) -> tuple[int, int]:
        """Resolution negociee (largeur, hauteur), (0, 0) si arrete."""
        if self._capture is None:
            return (0, 0)
        return (
            int(self._capture.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(self._capture.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        )

    def lire_image(self) -> np.ndarray | None:
        if not self.actif:
            return None
        ok, image = self._capture.read()
        if not ok or image is None:
            return None
        return image

    def arreter(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            logger.debug("Camera liberee")


class FournisseurOpenCV:
    """Ouvre la camera avant ou arriere via OpenCV."""

    def __init__(self, config: ConfigCapture | None = None) -> None:
        self.config = config or ConfigCapture()

    def index_pour(self, direction: DirectionCamera) -> int:
        if direction is DirectionCamera.USER:
            return self.config.index_camera_avant
        return self.config.index_camera_arriere

    def ouvrir(
        self, direction: DirectionCamera, largeur_ideale: int, hauteur_ideale: int
    ) -> FluxOpenCV:
        index = self.index_pour(direction)
        capture = cv2.VideoCapture(index)
        if not capture.isOpened():
            capture.release()
            raise PermissionRefusee(
                f"Impossible d'ouvrir la camera {direction.value} (index {index})"
            )

        try:
            capture.set(cv2.CAP_PROP_FRAME_WIDTH, largeur_ideale)
            capture.set(cv2.CAP_PROP_FRAME_HEIGHT, hauteur_ideale)

            # Les premieres images sont souvent sous-exposees
            for _ in range(self.config.images_prechauffage):
                capture.read()
        except cv2.error as e:
            capture.release()
            raise PermissionRefusee(
                f"Camera {direction.value} inutilisable (index {index}): {e}"
            ) from e

        flux = FluxOpenCV(capture)
        largeur, hauteur = flux.resolution
        logger.info(
            "Camera %s ouverte (index %d, %dx%d)", direction.value, index, largeur, hauteur
        )
        return flux


@dataclass
class SessionCamera:
    """Session video active, possedee exclusivement par le moteur de capture."""

    direction: DirectionCamera
    flux: FluxVideo

    @property
    def active(self) -> bool:
        return self.flux.actif

    def arreter(self) -> None:
        self.flux.arreter()
