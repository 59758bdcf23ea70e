"""Configuration de la capture de justificatifs.

Toutes les constantes (ratio du cadre, marges, resolution ideale, bornes de
sortie, qualite JPEG, validation des documents) sont regroupees dans
ConfigCapture et peuvent etre surchargees par un fichier YAML.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

load_dotenv()

RATIO_A4 = 21 / 29.7

TYPES_MIME_ACCEPTES = [
    "image/jpeg",
    "image/png",
    "image/webp",
    "application/pdf",
]


class ConfigCapture(BaseModel):
    """Parametres de la capture, du recadrage et de la validation."""

    # Cadre de guidage
    ratio_cible: float | None = Field(
        default=RATIO_A4,
        description="Ratio largeur/hauteur du cadre; None pour un cadre libre",
    )
    marge_haut: float = Field(default=0.08, description="Marge en haut (fraction)")
    marge_bas: float = Field(default=0.20, description="Marge en bas (fraction)")
    marge_horizontale: float = Field(
        default=0.10, description="Marge horizontale totale, repartie gauche/droite"
    )
    marge_laterale: float = Field(
        default=0.05, description="Marge fixe de chaque cote (cadre libre)"
    )

    # Camera
    largeur_ideale: int = Field(default=1920, gt=0)
    hauteur_ideale: int = Field(default=1080, gt=0)
    index_camera_arriere: int = Field(default=0, ge=0)
    index_camera_avant: int = Field(default=1, ge=0)
    images_prechauffage: int = Field(default=3, ge=0)

    # Sortie
    largeur_max: int = Field(default=1200, gt=0)
    hauteur_max: int = Field(default=1600, gt=0)
    qualite_jpeg: float = Field(default=0.8, gt=0.0, le=1.0)

    # Documents
    types_mime_acceptes: list[str] = Field(default_factory=lambda: list(TYPES_MIME_ACCEPTES))
    taille_max_octets: int = Field(default=10 * 1024 * 1024, gt=0)
    seuil_compression_octets: int = Field(default=500 * 1024, ge=0)

    @field_validator("marge_haut", "marge_bas", "marge_horizontale", "marge_laterale")
    @classmethod
    def _verifier_fraction(cls, v: float) -> float:
        if not 0.0 <= v < 1.0:
            raise ValueError(f"Une marge doit etre dans [0, 1): {v}")
        return v

    @field_validator("ratio_cible")
    @classmethod
    def _verifier_ratio(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError(f"Le ratio cible doit etre positif: {v}")
        return v

    @model_validator(mode="after")
    def _verifier_marges(self) -> ConfigCapture:
        if self.marge_haut + self.marge_bas >= 1.0:
            raise ValueError("marge_haut + marge_bas doit etre inferieur a 1")
        if 2 * self.marge_laterale >= 1.0:
            raise ValueError("2 x marge_laterale doit etre inferieur a 1")
        return self


def charger_config(chemin: Path | str | None = None) -> ConfigCapture:
    """Charge la configuration depuis un fichier YAML.

    Args:
        chemin: Fichier YAML. Si absent, la variable d'environnement
            FIDUCAM_CONFIG est utilisee.

    Returns:
        ConfigCapture validee. Les valeurs par defaut s'appliquent si aucun
        fichier n'est trouve ou si le fichier est vide.
    """
    if chemin is None:
        chemin = os.environ.get("FIDUCAM_CONFIG") or None
    if chemin is None:
        return ConfigCapture()

    chemin = Path(chemin)
    if not chemin.exists():
        logger.info("Fichier de configuration introuvable, valeurs par defaut: %s", chemin)
        return ConfigCapture()

    with open(chemin, encoding="utf-8") as f:
        donnees = yaml.safe_load(f)

    if not donnees:
        return ConfigCapture()
    if not isinstance(donnees, dict):
        raise ValueError(f"Configuration invalide dans {chemin}: mapping attendu")

    logger.debug("Configuration chargee depuis %s", chemin)
    return ConfigCapture.model_validate(donnees)


def sauvegarder_config(config: ConfigCapture, chemin: Path) -> None:
    """Ecrit la configuration dans un fichier YAML."""
    chemin.parent.mkdir(parents=True, exist_ok=True)
    with open(chemin, "w", encoding="utf-8") as f:
        yaml.dump(
            config.model_dump(mode="json"),
            f,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
        )
