"""Geometrie du cadre de guidage et du recadrage.

Le cadre de guidage est exprime en fractions de la vue (marges haut/bas/
gauche/droite). Il est ajuste au ratio cible (A4 par defaut) dans la zone
disponible, puis applique aux dimensions natives de la camera pour obtenir
le rectangle de recadrage en pixels.
"""

from __future__ import annotations

from dataclasses import dataclass

from fiducam.config import ConfigCapture


@dataclass(frozen=True)
class CadreGuide:
    """Marges fractionnaires du cadre de guidage, chacune dans [0, 1)."""

    haut: float
    bas: float
    gauche: float
    droite: float

    def __post_init__(self) -> None:
        for nom in ("haut", "bas", "gauche", "droite"):
            valeur = getattr(self, nom)
            if not 0.0 <= valeur < 1.0:
                raise ValueError(f"Marge {nom} hors de [0, 1): {valeur}")
        if self.haut + self.bas >= 1.0:
            raise ValueError("Les marges haut et bas couvrent toute la hauteur")
        if self.gauche + self.droite >= 1.0:
            raise ValueError("Les marges gauche et droite couvrent toute la largeur")

    @property
    def largeur_relative(self) -> float:
        return 1.0 - self.gauche - self.droite

    @property
    def hauteur_relative(self) -> float:
        return 1.0 - self.haut - self.bas


@dataclass(frozen=True)
class RectangleRecadrage:
    """Zone a conserver, en pixels natifs."""

    x: int
    y: int
    largeur: int
    hauteur: int

    @property
    def boite(self) -> tuple[int, int, int, int]:
        """Boite (gauche, haut, droite, bas) au format Pillow."""
        return (self.x, self.y, self.x + self.largeur, self.y + self.hauteur)


def calculer_cadre_guide(
    largeur_vue: float,
    hauteur_vue: float,
    config: ConfigCapture,
) -> CadreGuide:
    """Calcule le cadre de guidage pour une vue donnee.

    Le cadre respecte exactement config.ratio_cible, est centre
    horizontalement et commence a marge_haut depuis le haut. Sans ratio
    cible, les marges configurees sont retournees telles quelles.

    Args:
        largeur_vue: Largeur de la vue en pixels.
        hauteur_vue: Hauteur de la vue en pixels.
        config: Configuration des marges et du ratio.

    Returns:
        CadreGuide en fractions de la vue.

    Raises:
        ValueError: Si une dimension de la vue n'est pas positive.
    """
    if largeur_vue <= 0 or hauteur_vue <= 0:
        raise ValueError(f"Dimensions de vue invalides: {largeur_vue}x{hauteur_vue}")

    if config.ratio_cible is None:
        return CadreGuide(
            haut=config.marge_haut,
            bas=config.marge_bas,
            gauche=config.marge_laterale,
            droite=config.marge_laterale,
        )

    ratio = config.ratio_cible
    hauteur_dispo = hauteur_vue * (1.0 - config.marge_haut - config.marge_bas)
    largeur_dispo = largeur_vue * (1.0 - config.marge_horizontale)

    hauteur = hauteur_dispo
    largeur = hauteur * ratio
    if largeur > largeur_dispo:
        largeur = largeur_dispo
        hauteur = largeur / ratio

    gauche = (largeur_vue - largeur) / 2 / largeur_vue
    haut = config.marge_haut
    bas = 1.0 - haut - hauteur / hauteur_vue

    # Erreurs d'arrondi flottant pres de zero
    return CadreGuide(
        haut=haut,
        bas=max(bas, 0.0),
        gauche=max(gauche, 0.0),
        droite=max(gauche, 0.0),
    )


def rectangle_recadrage(
    cadre: CadreGuide,
    largeur_native: int,
    hauteur_native: int,
) -> RectangleRecadrage:
    """Applique le cadre aux dimensions natives de l'image.

    Le rectangle est arrondi au pixel et borne a [0, largeur] x [0, hauteur],
    avec au moins un pixel dans chaque direction.
    """
    if largeur_native <= 0 or hauteur_native <= 0:
        raise ValueError(f"Dimensions natives invalides: {largeur_native}x{hauteur_native}")

    x = min(round(largeur_native * cadre.gauche), largeur_native - 1)
    y = min(round(hauteur_native * cadre.haut), hauteur_native - 1)
    largeur = round(largeur_native * cadre.largeur_relative)
    hauteur = round(hauteur_native * cadre.hauteur_relative)

    largeur = max(1, min(largeur, largeur_native - x))
    hauteur = max(1, min(hauteur, hauteur_native - y))
    return RectangleRecadrage(x=x, y=y, largeur=largeur, hauteur=hauteur)


def dimensions_sortie(
    largeur: int,
    hauteur: int,
    largeur_max: int,
    hauteur_max: int,
) -> tuple[int, int]:
    """Dimensions finales, reduites proportionnellement (jamais agrandies).

    La largeur est bornee en premier, puis la hauteur si elle depasse encore.
    Chaque axe est arrondi separement au pixel: pour une zone tres aplatie
    (ex. 2500x10 -> 1200x5), le ratio obtenu peut s'ecarter de plus de 1e-3
    du ratio source, aucune taille entiere ne faisant mieux.
    """
    l_finale: float = largeur
    h_finale: float = hauteur

    if l_finale > largeur_max:
        h_finale = h_finale * largeur_max / l_finale
        l_finale = largeur_max

    if h_finale > hauteur_max:
        l_finale = l_finale * hauteur_max / h_finale
        h_finale = hauteur_max

    return max(1, round(l_finale)), max(1, round(h_finale))
