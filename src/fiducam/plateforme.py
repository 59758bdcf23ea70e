"""Detection de plateforme et invitation a installer l'application.

L'evenement d'installation differe (Android/Chrome) est conserve dans un
registre unique au niveau du processus, accessible par registre_invite().
"""

from __future__ import annotations

import datetime
import logging
import re
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

DELAI_APRES_REJET = datetime.timedelta(days=7)

_RE_IOS = re.compile(r"iphone|ipad|ipod")
_RE_ANDROID = re.compile(r"android")
_RE_MOBILE = re.compile(r"mobile")


class Plateforme(str, Enum):
    """Plateforme du client, selon ses capacites d'installation."""

    IOS = "ios"
    ANDROID_INVITE = "android_invite"
    ANDROID_SANS_INVITE = "android_sans_invite"
    BUREAU = "bureau"


def detecter_plateforme(user_agent: str, invite_disponible: bool = False) -> Plateforme:
    """Deduit la plateforme de l'agent utilisateur."""
    ua = user_agent.lower()
    if _RE_IOS.search(ua):
        return Plateforme.IOS
    if _RE_ANDROID.search(ua):
        return Plateforme.ANDROID_INVITE if invite_disponible else Plateforme.ANDROID_SANS_INVITE
    return Plateforme.BUREAU


def est_mobile(user_agent: str) -> bool:
    ua = user_agent.lower()
    return bool(_RE_IOS.search(ua) or _RE_ANDROID.search(ua) or _RE_MOBILE.search(ua))


def instructions_installation(plateforme: Plateforme) -> list[str]:
    """Etapes d'installation a afficher pour une plateforme."""
    if plateforme is Plateforme.IOS:
        # Safari ne propose pas d'invitation native
        return [
            "Appuyez sur le bouton Partager en bas de Safari",
            "Faites defiler et appuyez sur Sur l'ecran d'accueil",
            "Appuyez sur Ajouter en haut a droite",
        ]
    if plateforme is Plateforme.ANDROID_INVITE:
        return ["Appuyez sur Installer pour ajouter FiduDocs a l'ecran d'accueil"]
    if plateforme is Plateforme.ANDROID_SANS_INVITE:
        return [
            "Ouvrez le menu de Chrome (trois points en haut a droite)",
            "Appuyez sur Installer l'application ou Ajouter a l'ecran d'accueil",
        ]
    return [
        "Cliquez sur l'icone d'installation dans la barre d'adresse",
        "Ou ouvrez cette page sur votre telephone pour prendre vos justificatifs en photo",
    ]


def est_installee(
    display_mode_autonome: bool = False,
    standalone: bool = False,
    referrer: str = "",
) -> bool:
    """L'application tourne-t-elle en mode installe (standalone)?"""
    return display_mode_autonome or standalone or "android-app://" in referrer


def doit_afficher_invite(
    plateforme: Plateforme,
    installee: bool,
    installable: bool,
    rejet_le: datetime.datetime | None = None,
    maintenant: datetime.datetime | None = None,
) -> bool:
    """Invitation affichee sur mobile seulement, hors installation et hors rejet recent."""
    if plateforme is Plateforme.BUREAU or installee or not installable:
        return False
    if rejet_le is not None:
        maintenant = maintenant or datetime.datetime.now(tz=rejet_le.tzinfo)
        if maintenant - rejet_le < DELAI_APRES_REJET:
            return False
    return True


class RegistreInvite:
    """Conserve le dernier evenement d'installation differe."""

    def __init__(self) -> None:
        self._evenement: Any | None = None
        self._installee = False

    @property
    def est_installable(self) -> bool:
        return self._evenement is not None and not self._installee

    @property
    def installee(self) -> bool:
        return self._installee

    def memoriser(self, evenement: Any) -> None:
        """Remplace l'evenement conserve par le plus recent."""
        self._evenement = evenement
        logger.debug("Invitation d'installation memorisee")

    def consommer(self) -> Any | None:
        """Retourne l'evenement et le retire du registre (usage unique)."""
        evenement, self._evenement = self._evenement, None
        return evenement

    def marquer_installee(self) -> None:
        self._installee = True
        self._evenement = None
        logger.info("Application installee")

    def reinitialiser(self) -> None:
        self._evenement = None
        self._installee = False


_registre = RegistreInvite()


def registre_invite() -> RegistreInvite:
    """Acces unique au registre du processus."""
    return _registre
