"""Moteur de capture: cycle de vie de la camera et capture recadree.

Etats: INACTIF -> DEMANDE -> DIRECT -> CAPTURE -> {DIRECT (reprendre) | FERME}.
DEMANDE passe a PERMISSION_REFUSEE si la camera est refusee; demarrer()
peut etre rappele depuis cet etat. FERME est definitif. Une seule session
video est ouverte a la fois. La session reste active pendant l'apercu:
seuls arreter() et fermer() la liberent.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable

from fiducam.capture.cadre import CadreGuide, calculer_cadre_guide, rectangle_recadrage
from fiducam.capture.camera import DirectionCamera, FournisseurCamera, SessionCamera
from fiducam.capture.encodage import ArtefactRecadre, image_depuis_trame, produire_artefact
from fiducam.capture.erreurs import (
    ContexteCaptureIndisponible,
    EchecEncodage,
    ErreurCapture,
    PermissionRefusee,
)
from fiducam.config import ConfigCapture
from fiducam.documents.depot import nom_capture

logger = logging.getLogger(__name__)


class EtatCapture(str, Enum):
    """Etat du moteur de capture."""

    INACTIF = "inactif"
    DEMANDE = "demande"
    DIRECT = "direct"
    CAPTURE = "capture"
    PERMISSION_REFUSEE = "permission_refusee"
    FERME = "ferme"


class MoteurCapture:
    """Pilote une camera et produit des images recadrees selon le cadre de guidage.

    Utilisable comme gestionnaire de contexte: la camera est toujours liberee
    a la sortie, y compris en cas d'erreur.
    """

    def __init__(
        self,
        fournisseur: FournisseurCamera,
        config: ConfigCapture | None = None,
        direction: DirectionCamera = DirectionCamera.ENVIRONMENT,
    ) -> None:
        self._fournisseur = fournisseur
        self.config = config or ConfigCapture()
        self._direction = direction
        self._etat = EtatCapture.INACTIF
        self._session: SessionCamera | None = None
        self._cadre: CadreGuide | None = None
        self._artefact: ArtefactRecadre | None = None
        self._derniere_erreur: ErreurCapture | None = None

    def __enter__(self) -> MoteurCapture:
        return self

    def __exit__(self, *args: object) -> None:
        self.fermer()

    @property
    def etat(self) -> EtatCapture:
        return self._etat

    @property
    def direction(self) -> DirectionCamera:
        return self._direction

    @property
    def session(self) -> SessionCamera | None:
        return self._session

    @property
    def cadre(self) -> CadreGuide | None:
        return self._cadre

    @property
    def artefact(self) -> ArtefactRecadre | None:
        return self._artefact

    @property
    def derniere_erreur(self) -> ErreurCapture | None:
        return self._derniere_erreur

    def _changer_etat(self, etat: EtatCapture) -> None:
        logger.debug("Etat capture: %s -> %s", self._etat.value, etat.value)
        self._etat = etat

    # ------------------------------------------------------------------
    # Cycle de vie de la camera
    # ------------------------------------------------------------------

    def demarrer(self, direction: DirectionCamera | None = None) -> bool:
        """Ouvre la camera dans la direction donnee (ou la direction courante).

        Returns:
            True si la camera est active, False si l'acces a ete refuse.

        Raises:
            ContexteCaptureIndisponible: Le moteur a ete ferme.
        """
        if self._etat is EtatCapture.FERME:
            erreur = ContexteCaptureIndisponible("Moteur de capture ferme")
            self._derniere_erreur = erreur
            raise erreur

        if direction is not None:
            self._direction = direction

        self._liberer_session()
        self._artefact = None
        self._derniere_erreur = None
        self._changer_etat(EtatCapture.DEMANDE)

        try:
            flux = self._fournisseur.ouvrir(
                self._direction, self.config.largeur_ideale, self.config.hauteur_ideale
            )
        except (PermissionRefusee, OSError) as e:
            erreur = e if isinstance(e, PermissionRefusee) else PermissionRefusee(str(e))
            logger.warning("Acces camera refuse: %s", erreur)
            self._derniere_erreur = erreur
            self._changer_etat(EtatCapture.PERMISSION_REFUSEE)
            return False

        self._session = SessionCamera(direction=self._direction, flux=flux)
        self._changer_etat(EtatCapture.DIRECT)
        return True

    def arreter(self) -> None:
        """Libere la camera. Sans effet si aucune session n'est ouverte."""
        self._liberer_session()
        if self._etat in (EtatCapture.DEMANDE, EtatCapture.DIRECT, EtatCapture.CAPTURE):
            self._changer_etat(EtatCapture.INACTIF)

    def changer_direction(self) -> bool:
        """Passe de la camera avant a la camera arriere (ou l'inverse).

        Toute image en apercu est abandonnee et l'ancienne session est
        liberee avant l'ouverture de la nouvelle.
        """
        self._artefact = None
        self._liberer_session()
        return self.demarrer(self._direction.inverser())

    def fermer(self) -> None:
        """Ferme le moteur et libere la camera."""
        self._liberer_session()
        self._artefact = None
        if self._etat is not EtatCapture.FERME:
            self._changer_etat(EtatCapture.FERME)

    def _liberer_session(self) -> None:
        if self._session is not None:
            session, self._session = self._session, None
            session.arreter()
            logger.debug("Session camera %s arretee", session.direction.value)

    # ------------------------------------------------------------------
    # Cadre et capture
    # ------------------------------------------------------------------

    def recalculer_cadre(self, largeur_vue: float, hauteur_vue: float) -> CadreGuide:
        """Recalcule le cadre de guidage apres un changement de taille de la vue."""
        self._cadre = calculer_cadre_guide(largeur_vue, hauteur_vue, self.config)
        return self._cadre

    def capturer_photo(self) -> ArtefactRecadre:
        """Capture l'image video courante et la recadre selon le cadre de guidage.

        Un second appel avant confirmation ou reprise remplace l'artefact courant.

        Raises:
            ContexteCaptureIndisponible: Pas de session active, pas de cadre ou
                pas d'image video.
            EchecEncodage: Si l'encodage JPEG echoue.
        """
        try:
            artefact = self._capturer()
        except ErreurCapture as e:
            logger.warning("Capture impossible: %s", e)
            self._derniere_erreur = e
            raise

        self._artefact = artefact
        self._derniere_erreur = None
        self._changer_etat(EtatCapture.CAPTURE)
        return artefact

    def _capturer(self) -> ArtefactRecadre:
        if self._etat not in (EtatCapture.DIRECT, EtatCapture.CAPTURE):
            raise ContexteCaptureIndisponible(
                f"Aucune camera active (etat: {self._etat.value})"
            )
        if self._session is None or not self._session.active:
            raise ContexteCaptureIndisponible("Aucune session camera active")
        if self._cadre is None:
            raise ContexteCaptureIndisponible("Cadre de guidage non calcule")

        trame = self._session.flux.lire_image()
        image = image_depuis_trame(trame)

        rectangle = rectangle_recadrage(self._cadre, image.width, image.height)
        return produire_artefact(image, rectangle, self.config)

    def reprendre(self) -> None:
        """Abandonne l'image en apercu et revient au flux video."""
        self._artefact = None
        if self._etat is EtatCapture.FERME:
            return
        if self._session is None or not self._session.active:
            logger.info("Session camera inactive, redemarrage")
            self.demarrer()
            return
        self._changer_etat(EtatCapture.DIRECT)

    def confirmer_capture(
        self,
        televerseur: Callable[[bytes, str, str], Any],
        nom: str | None = None,
    ) -> Any:
        """Transmet l'image recadree au televerseur.

        Args:
            televerseur: Appele avec (donnees, nom, type_mime).
            nom: Nom du fichier; par defaut capture-<horodatage>.jpg.

        Returns:
            La valeur retournee par le televerseur.

        Raises:
            ContexteCaptureIndisponible: Aucune image capturee.
            EchecEncodage: L'image capturee est vide.
        """
        artefact = self._artefact
        if artefact is None:
            erreur: ErreurCapture = ContexteCaptureIndisponible("Aucune image a confirmer")
            self._derniere_erreur = erreur
            raise erreur
        if not artefact.donnees:
            erreur = EchecEncodage("L'image capturee est vide, reprenez la photo")
            self._derniere_erreur = erreur
            raise erreur

        resultat = televerseur(artefact.donnees, nom or nom_capture(), artefact.type_mime)
        logger.info("Capture transmise (%d octets)", artefact.taille)

        self._artefact = None
        if self._etat is EtatCapture.CAPTURE:
            self._changer_etat(EtatCapture.DIRECT)
        return resultat
