"""Recadrage, reduction et encodage JPEG des images capturees.

Inclut aussi la compression des images televersees depuis un fichier:
les images de plus de 500 Ko sont reduites aux bornes maximales et
re-encodees en JPEG.
"""

from __future__ import annotations

import base64
import io
import logging
from dataclasses import dataclass

import numpy as np
from PIL import Image, UnidentifiedImageError

from fiducam.capture.cadre import RectangleRecadrage, dimensions_sortie
from fiducam.capture.erreurs import ContexteCaptureIndisponible, EchecEncodage
from fiducam.config import ConfigCapture

logger = logging.getLogger(__name__)

TYPE_MIME_JPEG = "image/jpeg"


@dataclass
class ArtefactRecadre:
    """Image finale recadree, prete a etre televersee."""

    donnees: bytes
    largeur: int
    hauteur: int
    type_mime: str = TYPE_MIME_JPEG

    @property
    def taille(self) -> int:
        return len(self.donnees)

    def apercu(self) -> str:
        """URL data: affichable de l'image."""
        encode = base64.standard_b64encode(self.donnees).decode("ascii")
        return f"data:{self.type_mime};base64,{encode}"


def image_depuis_trame(trame: np.ndarray | None) -> Image.Image:
    """Convertit une image OpenCV (BGR ou niveaux de gris) en image Pillow RGB."""
    if trame is None or trame.size == 0:
        raise ContexteCaptureIndisponible("Aucune image video disponible")

    if trame.ndim == 2:
        return Image.fromarray(trame).convert("RGB")
    if trame.ndim == 3 and trame.shape[2] == 3:
        return Image.fromarray(np.ascontiguousarray(trame[:, :, ::-1]))

    raise ContexteCaptureIndisponible(f"Format d'image video non supporte: {trame.shape}")


def recadrer_image(
    image: Image.Image,
    rectangle: RectangleRecadrage,
    largeur_max: int,
    hauteur_max: int,
) -> Image.Image:
    """Decoupe le rectangle et le reduit pour tenir dans les bornes."""
    zone = image.crop(rectangle.boite)
    cible = dimensions_sortie(rectangle.largeur, rectangle.hauteur, largeur_max, hauteur_max)
    if cible == zone.size:
        return zone
    return zone.resize(cible, Image.Resampling.LANCZOS)


def encoder_jpeg(image: Image.Image, qualite: float) -> bytes:
    """Encode en JPEG avec une qualite dans (0, 1]."""
    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")

    tampon = io.BytesIO()
    try:
        image.save(tampon, format="JPEG", quality=round(qualite * 100))
    except OSError as e:
        raise EchecEncodage(f"Echec de l'encodage JPEG: {e}") from e

    donnees = tampon.getvalue()
    if not donnees:
        raise EchecEncodage("L'encodage JPEG n'a produit aucune donnee")
    return donnees


def produire_artefact(
    image: Image.Image,
    rectangle: RectangleRecadrage,
    config: ConfigCapture,
) -> ArtefactRecadre:
    """Recadre, reduit et encode une image capturee."""
    finale = recadrer_image(image, rectangle, config.largeur_max, config.hauteur_max)
    donnees = encoder_jpeg(finale, config.qualite_jpeg)
    logger.info(
        "Image recadree: %dx%d -> %dx%d (%d octets)",
        rectangle.largeur,
        rectangle.hauteur,
        finale.width,
        finale.height,
        len(donnees),
    )
    return ArtefactRecadre(donnees=donnees, largeur=finale.width, hauteur=finale.height)


def compresser_image(donnees: bytes, config: ConfigCapture) -> bytes:
    """Reduit une image aux bornes maximales et la re-encode en JPEG.

    Raises:
        ValueError: Si les donnees ne sont pas une image lisible.
        EchecEncodage: Si l'encodage ne produit rien.
    """
    try:
        with Image.open(io.BytesIO(donnees)) as img:
            img.load()
            largeur, hauteur = img.size
            cible = dimensions_sortie(largeur, hauteur, config.largeur_max, config.hauteur_max)
            if cible != img.size:
                img = img.resize(cible, Image.Resampling.LANCZOS)
            return encoder_jpeg(img, config.qualite_jpeg)
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Impossible de charger l'image: {e}") from e


def compresser_si_necessaire(
    donnees: bytes,
    type_mime: str,
    config: ConfigCapture,
) -> tuple[bytes, str]:
    """Compresse seulement les images au-dela du seuil de compression.

    Returns:
        (donnees, type_mime) compresses, ou l'original si ce n'est pas une
        image, s'il est deja petit, ou si la compression echoue.
    """
    if not type_mime.startswith("image/"):
        return donnees, type_mime

    if len(donnees) < config.seuil_compression_octets:
        return donnees, type_mime

    try:
        compresse = compresser_image(donnees, config)
    except (ValueError, EchecEncodage) as e:
        logger.warning("Erreur compression image, original conserve: %s", e)
        return donnees, type_mime

    logger.info("Image compressee: %d -> %d octets", len(donnees), len(compresse))
    return compresse, TYPE_MIME_JPEG
